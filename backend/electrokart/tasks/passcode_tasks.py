# Celery 작업 & 스케줄
# - OTP_SWEEP_INTERVAL_SECONDS 주기로 만료된 OTP 레코드를 물리적으로 삭제
# - 조회 시점에 만료를 이미 확인하므로 이 작업은 선택 사항 (MongoDB TTL 인덱스의 보조 수단)

import asyncio
import logging
from celery import Celery

from ..core.config import settings
from ..repositories.passcode_repository import get_passcode_repository
from beanie import init_beanie
from motor.motor_asyncio import AsyncIOMotorClient
from ..models.user import User
from ..models.passcode import PasscodeRecord

logger = logging.getLogger(__name__)

# Celery 앱 초기화
celery_app = Celery("passcode_tasks", broker=settings.REDIS_URL, backend=settings.REDIS_URL)

# 비동기 Beanie 초기화 유틸
async def _init_beanie():
    client = AsyncIOMotorClient(settings.MONGODB_URI)
    db = client.get_default_database()
    await init_beanie(database=db, document_models=[User, PasscodeRecord])

@celery_app.on_after_configure.connect
def setup_periodic_tasks(sender, **kwargs):
    sender.add_periodic_task(
        float(settings.OTP_SWEEP_INTERVAL_SECONDS),
        purge_expired_passcodes.s(),
        name="purge_expired_passcodes",
    )

@celery_app.task
def purge_expired_passcodes() -> int:
    # Celery는 동기 함수이므로, 내부에서 asyncio 루프 실행
    async def _run() -> int:
        await _init_beanie()
        return await get_passcode_repository().purge_expired()
    deleted = asyncio.run(_run())
    logger.info(f"[otp] Purged {deleted} expired passcode(s)")
    return deleted
