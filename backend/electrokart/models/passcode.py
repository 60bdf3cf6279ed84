# 로그인 OTP 모델 (Beanie Document)
# - 이메일당 최대 1개의 레코드 (email unique 인덱스)
# - created_at 기준 TTL 인덱스로 MongoDB가 만료된 레코드를 자동 삭제
#   (TTL 모니터는 약 60초 주기로 돌기 때문에 조회 시점에도 만료 여부를 다시 확인합니다)

from datetime import datetime
from beanie import Document, Indexed
from pydantic import Field
from pymongo import ASCENDING, IndexModel

from ..core.config import settings

class PasscodeRecord(Document):
    email: Indexed(str, unique=True)
    code: Indexed(str)
    created_at: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        name = "otps"
        indexes = [
            IndexModel(
                [("created_at", ASCENDING)],
                name="created_at_ttl",
                expireAfterSeconds=settings.OTP_TTL_SECONDS,
            ),
        ]
