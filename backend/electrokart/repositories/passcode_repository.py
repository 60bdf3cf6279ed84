# OTP 저장소 레이어
# - 이메일당 하나의 레코드만 유지 (put은 단일 upsert로 원자적 교체)
# - 만료(TTL) 여부는 조회 시점에 created_at으로 직접 판단 (lazy expiry)
# - MongoDB TTL 인덱스와 Celery 정리 작업은 물리적 삭제만 담당합니다

from datetime import datetime, timedelta
from typing import Callable, Optional

from ..core.config import settings
from ..models.passcode import PasscodeRecord


def passcode_cutoff(now: datetime, ttl_seconds: int) -> datetime:
    """created_at이 이 시각보다 뒤인 레코드만 살아 있는 레코드입니다."""
    return now - timedelta(seconds=ttl_seconds)


def passcode_expired(created_at: datetime, now: datetime, ttl_seconds: int) -> bool:
    """생성 후 정확히 ttl_seconds가 지난 시점부터 만료로 간주합니다."""
    return created_at <= passcode_cutoff(now, ttl_seconds)


class PasscodeRepository:
    def __init__(self, ttl_seconds: int = 600, clock: Callable[[], datetime] = datetime.utcnow):
        self.ttl_seconds = ttl_seconds
        self._clock = clock

    def _cutoff(self) -> datetime:
        return passcode_cutoff(self._clock(), self.ttl_seconds)

    async def put(self, email: str, code: str) -> None:
        # 주니어 개발자님께: delete 후 insert를 따로 호출하면 그 사이에 다른 요청이
        # 끼어들 수 있습니다. replace_one(upsert=True)는 문서 하나에 대한 단일 연산이라
        # 이전 레코드와 새 레코드가 동시에 보이는 순간이 없습니다.
        doc = {"email": email, "code": code, "created_at": self._clock()}
        await PasscodeRecord.get_motor_collection().replace_one({"email": email}, doc, upsert=True)

    async def find_by_code(self, code: str) -> Optional[PasscodeRecord]:
        # 같은 코드가 여러 개라면 가장 최근에 생성된 레코드를 반환
        return await (
            PasscodeRecord.find(
                PasscodeRecord.code == code,
                PasscodeRecord.created_at > self._cutoff(),
            )
            .sort("-created_at")
            .first_or_none()
        )

    async def find_by_email(self, email: str) -> Optional[PasscodeRecord]:
        return await PasscodeRecord.find_one(
            PasscodeRecord.email == email,
            PasscodeRecord.created_at > self._cutoff(),
        )

    async def delete_by_email(self, email: str) -> None:
        await PasscodeRecord.find(PasscodeRecord.email == email).delete()

    async def delete_by_code(self, code: str, email: Optional[str] = None) -> bool:
        """살아 있는 레코드 하나를 삭제하고, 실제로 삭제했는지 여부를 반환합니다.

        동시에 같은 코드를 검증하는 요청이 있으면 deleted_count가 1인 쪽만 성공합니다.
        """
        query = {"code": code, "created_at": {"$gt": self._cutoff()}}
        if email is not None:
            query["email"] = email
        result = await PasscodeRecord.get_motor_collection().delete_one(query)
        return result.deleted_count > 0

    async def purge_expired(self) -> int:
        result = await PasscodeRecord.find(PasscodeRecord.created_at <= self._cutoff()).delete()
        return result.deleted_count if result else 0


def get_passcode_repository() -> PasscodeRepository:
    return PasscodeRepository(ttl_seconds=settings.OTP_TTL_SECONDS)
