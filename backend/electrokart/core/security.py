# 보안/인증 유틸리티
# - 비밀번호 해싱/검증 (bcrypt, cost factor 설정 가능)
# - JWT 세션 토큰 발급/검증 (서버에 저장하지 않는 stateless 토큰)
# - 현재 사용자 가져오기(의존성)

from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Callable, Optional
from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from passlib.context import CryptContext
import jwt

from .config import settings
from .exceptions import TokenError, TokenExpired, TokenMalformed, TokenBadSignature
from ..models.user import User
from ..repositories.user_repository import UserRepository

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login")

ACCESS_TOKEN_TYPE = "access"


def _utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)


class PasswordHasher:
    """bcrypt 기반 비밀번호 해시. 솔트는 해시마다 무작위로 생성됩니다."""

    def __init__(self, rounds: int = 10):
        self._context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=rounds)

    def hash(self, password: str) -> str:
        return self._context.hash(password)

    def verify(self, plain_password: str, hashed_password: str) -> bool:
        return self._context.verify(plain_password, hashed_password)

    def dummy_verify(self) -> None:
        # 존재하지 않는 사용자에 대해서도 비슷한 시간을 소모하게 합니다.
        self._context.dummy_verify()


class TokenService:
    """
    세션 토큰 발급기.

    비밀키는 생성 시 한 번만 주입되고 이후 읽기 전용입니다. 서버 측 상태가 없으므로
    토큰의 유효성은 서명과 만료 시각만으로 결정됩니다.

    주니어 개발자님께: clock을 주입할 수 있게 해 두면 테스트에서 만료 경계(정확히 3600초)를
    실제로 기다리지 않고 검증할 수 있습니다.
    """

    def __init__(
        self,
        secret_key: str,
        algorithm: str = "HS256",
        expires_in: int = 3600,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self._secret_key = secret_key
        self._algorithm = algorithm
        self._expires_in = timedelta(seconds=expires_in)
        self._clock = clock

    def issue(self, user_id: str) -> str:
        now = self._clock()
        issued_at = int(now.timestamp())
        payload = {
            "sub": str(user_id),
            "type": ACCESS_TOKEN_TYPE,
            "iat": issued_at,
            "nbf": issued_at,
            # 정수로 자르면 3600초보다 일찍 만료되므로 소수점까지 유지 (NumericDate는 실수 허용)
            "exp": (now + self._expires_in).timestamp(),
        }
        return jwt.encode(payload, self._secret_key, algorithm=self._algorithm)

    def verify(self, token: str) -> str:
        """토큰을 검증하고 사용자 ID를 반환합니다. 실패 시 TokenError 하위 예외를 발생시킵니다."""
        try:
            payload = jwt.decode(
                token,
                self._secret_key,
                algorithms=[self._algorithm],
                # 만료는 주입된 clock 기준으로 아래에서 직접 검사
                options={
                    "require": ["exp", "sub"],
                    "verify_exp": False,
                    "verify_nbf": False,
                    "verify_iat": False,
                },
            )
        except jwt.InvalidSignatureError as e:
            raise TokenBadSignature() from e
        except jwt.PyJWTError as e:
            raise TokenMalformed() from e

        exp = payload["exp"]
        if not isinstance(exp, (int, float)) or payload.get("type") != ACCESS_TOKEN_TYPE:
            raise TokenMalformed()
        if self._clock().timestamp() >= exp:
            raise TokenExpired()
        return str(payload["sub"])


# ---- 의존성 (프로세스당 한 번 생성) ----

@lru_cache
def get_token_service() -> TokenService:
    return TokenService(
        secret_key=settings.JWT_SECRET_KEY,
        algorithm=settings.JWT_ALGORITHM,
        expires_in=settings.ACCESS_TOKEN_EXPIRE_SECONDS,
    )

@lru_cache
def get_password_hasher() -> PasswordHasher:
    return PasswordHasher(rounds=settings.BCRYPT_ROUNDS)


async def get_current_user(
    token: str = Depends(oauth2_scheme),
    tokens: TokenService = Depends(get_token_service),
    repo: UserRepository = Depends(UserRepository),
) -> User:
    # JWT 토큰 검증 후 사용자 조회. TokenError는 main.py의 핸들러가 401로 변환합니다.
    user_id = tokens.verify(token)
    user: Optional[User] = await repo.get(user_id)
    if not user:
        raise TokenError()
    return user
