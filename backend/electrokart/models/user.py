# User 도메인 모델 (Beanie Document)
# - 이름, 이메일, 비밀번호 해시, 생성일
# - 이메일은 unique 인덱스 (저장된 그대로 대소문자 구분)

from datetime import datetime
from beanie import Document, Indexed
from pydantic import Field

class User(Document):
    name: str
    email: Indexed(str, unique=True)  # 중복 방지 인덱스
    hashed_password: str = Field(repr=False)
    created_at: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        name = "users"  # 컬렉션명
