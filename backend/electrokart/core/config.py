# 설정 모듈
# - .env 값들을 한 곳에서 관리
# - 기본값을 제공하여 로컬 실행 편의성 확보

from pathlib import Path
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field

# 프로젝트 루트 디렉토리 경로 찾기
# 주니어 개발자님께: 이 파일은 backend/electrokart/core/config.py에 있으므로,
# 4단계 상위로 올라가면 프로젝트 루트가 됩니다.
PROJECT_ROOT = Path(__file__).parent.parent.parent.parent
ENV_FILE_PATH = PROJECT_ROOT / ".env"

class Settings(BaseSettings):
    APP_NAME: str = "electrokart"
    ENV: str = "dev"
    HOST: str = "0.0.0.0"
    PORT: int = 3001
    LOG_LEVEL: str = "INFO"

    MONGODB_URI: str = "mongodb://localhost:27017/electrokart"
    # 시작 시 MongoDB ping 재시도 횟수
    MONGODB_CONNECT_ATTEMPTS: int = 3

    JWT_SECRET_KEY: str = Field(..., description="JWT 토큰 서명에 사용되는 비밀키. 반드시 강력한 랜덤 문자열로 설정하세요.")
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_SECONDS: int = 3600

    # bcrypt cost factor (2^rounds 회 반복)
    BCRYPT_ROUNDS: int = Field(default=10, ge=4, le=31)

    # OTP 유효 시간 (초 단위). 기본값 10분
    OTP_TTL_SECONDS: int = 600
    # 만료된 OTP 정리 주기 (Celery beat)
    OTP_SWEEP_INTERVAL_SECONDS: int = 300

    CORS_ALLOW_ORIGINS: str = "http://localhost:5173,http://localhost:3000"

    REDIS_URL: str = "redis://localhost:6379/0"

    SMTP_HOST: str = "smtp.gmail.com"
    SMTP_PORT: int = 587
    SMTP_USER: str = ""
    SMTP_PASSWORD: str = ""
    SMTP_FROM: str = "Electrokart <noreply@example.com>"
    SMTP_TLS: bool = True
    # 메일 서버가 응답하지 않을 때 OTP 요청이 멈추지 않도록 소켓 타임아웃을 둡니다.
    SMTP_TIMEOUT_SECONDS: float = 10.0
    OTP_MAIL_SUBJECT: str = "Electrokart Login OTP"

    model_config = SettingsConfigDict(
        env_file=str(ENV_FILE_PATH) if ENV_FILE_PATH.exists() else ".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

settings = Settings()
