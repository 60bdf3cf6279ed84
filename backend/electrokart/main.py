# FastAPI 진입점
# - Beanie ODM 초기화 (MongoDB)
# - 라우터 라우팅
# - CORS 설정
# - 도메인 예외 -> HTTP 응답 변환
# - 만료 OTP 정리는 Celery가 별도 프로세스로 동작 (tasks/passcode_tasks.py 참고)

import logging
from datetime import datetime
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from motor.motor_asyncio import AsyncIOMotorClient
from beanie import init_beanie
from pymongo.errors import PyMongoError

from .core.config import settings
from .core.exceptions import AuthServiceError, TokenError
from .core.retry import create_retry_decorator
from .models.user import User
from .models.passcode import PasscodeRecord
from .api.auth import router as auth_router

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# FastAPI 애플리케이션 인스턴스 생성
app = FastAPI(
    title="Electrokart API",
    description="비밀번호 / OTP 로그인과 JWT 세션을 제공하는 쇼핑몰 백엔드",
    version="1.0.0"
)

# CORS 허용 도메인 세팅
origins = [o.strip() for o in settings.CORS_ALLOW_ORIGINS.split(",") if o.strip()]
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins or ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ---- 예외 핸들러 ----

@app.exception_handler(AuthServiceError)
async def auth_error_handler(request: Request, exc: AuthServiceError):
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, TokenError) else None
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message}, headers=headers)

@app.exception_handler(PyMongoError)
async def store_error_handler(request: Request, exc: PyMongoError):
    # 저장소 장애는 인증 실패(401)와 구분되는 일반 서버 오류로 응답
    logger.error(f"[mongo] {request.method} {request.url.path} failed: {exc}", exc_info=exc)
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content={"detail": "Internal server error"})

# ---- MongoDB ----

async def _connect_mongo() -> AsyncIOMotorClient:
    # 주니어 개발자님께: serverSelectionTimeoutMS는 서버 선택 타임아웃(밀리초)입니다.
    client = AsyncIOMotorClient(settings.MONGODB_URI, serverSelectionTimeoutMS=5000)

    @create_retry_decorator(max_attempts=settings.MONGODB_CONNECT_ATTEMPTS)
    async def _ping():
        await client.admin.command("ping")

    await _ping()
    return client

# Beanie 초기화 (앱 시작 시 1회)
@app.on_event("startup")
async def app_init():
    try:
        client = await _connect_mongo()
        db = client.get_default_database()
        await init_beanie(database=db, document_models=[User, PasscodeRecord])
        app.state.mongo_client = client
        logger.info("[mongo] Connected and Beanie initialised")
    except PyMongoError as e:
        # MongoDB 연결 실패 시에도 서버는 시작됩니다. 인증 API는 500을 반환합니다.
        logger.warning(f"[mongo] Connection failed: {e}")
        logger.info(f"[mongo] Check MONGODB_URI: {settings.MONGODB_URI}")

@app.on_event("shutdown")
async def app_shutdown():
    client = getattr(app.state, "mongo_client", None)
    if client is not None:
        client.close()

# 간단한 헬스체크
@app.get("/")
async def root():
    return {"ok": True, "app": settings.APP_NAME, "time": datetime.utcnow().isoformat()}

@app.get("/health")
async def health_check():
    return {"status": "ok", "app": settings.APP_NAME, "version": "1.0.0"}

# API 라우터 등록
app.include_router(auth_router, prefix="/api")
