# 사용자 저장소 레이어
# - 데이터 접근(조회/생성)만 담당 (서비스 로직 분리)
# - 이메일 중복은 unique 인덱스가 최종적으로 보장합니다

from typing import Optional
from beanie import PydanticObjectId
from bson import ObjectId
from pymongo.errors import DuplicateKeyError

from ..core.exceptions import DuplicateEmail
from ..models.user import User

class UserRepository:
    async def get_by_email(self, email: str) -> Optional[User]:
        return await User.find_one(User.email == email)

    async def create(self, name: str, email: str, hashed_password: str) -> User:
        user = User(name=name, email=email, hashed_password=hashed_password)
        try:
            return await user.insert()
        except DuplicateKeyError as e:
            # 동시에 같은 이메일로 가입한 경우 인덱스가 막아줍니다
            raise DuplicateEmail() from e

    async def get(self, user_id: str) -> Optional[User]:
        if not ObjectId.is_valid(user_id):
            return None
        return await User.get(PydanticObjectId(user_id))
