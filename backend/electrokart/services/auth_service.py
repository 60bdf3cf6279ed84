# 인증 서비스 레이어
# - 회원가입 (필수값 검증, 이메일 중복 체크, 비밀번호 해싱)
# - 비밀번호 로그인 (JWT 세션 토큰 발급)
# - OTP 로그인: 요청(메일 발송 후 저장) / 검증(1회용 소비 후 토큰 발급)

import logging
import secrets

from fastapi import Depends

from ..core.exceptions import (
    InvalidCredentials,
    InvalidOtp,
    UserNotRegistered,
    ValidationError,
    DuplicateEmail,
)
from ..core.security import PasswordHasher, TokenService, get_password_hasher, get_token_service
from ..repositories.user_repository import UserRepository
from ..repositories.passcode_repository import PasscodeRepository, get_passcode_repository
from .notifier import SmtpNotifier, get_notifier

logger = logging.getLogger(__name__)

OTP_MIN = 100000
OTP_MAX = 999999


def generate_otp() -> str:
    # 100000 ~ 999999 균등 분포 (secrets 모듈은 암호학적으로 안전한 난수)
    return str(OTP_MIN + secrets.randbelow(OTP_MAX - OTP_MIN + 1))


def _require(field_name: str, value: str) -> None:
    if value is None or not str(value).strip():
        raise ValidationError(field_name)


class AuthService:
    def __init__(
        self,
        users: UserRepository,
        passcodes: PasscodeRepository,
        tokens: TokenService,
        hasher: PasswordHasher,
        notifier: SmtpNotifier,
    ):
        self.users = users
        self.passcodes = passcodes
        self.tokens = tokens
        self.hasher = hasher
        self.notifier = notifier

    async def register(self, name: str, email: str, password: str):
        _require("name", name)
        _require("email", email)
        _require("password", password)

        existing = await self.users.get_by_email(email)
        if existing:
            raise DuplicateEmail()
        hashed = self.hasher.hash(password)
        user = await self.users.create(name, email, hashed)
        logger.info(f"[auth] Registered user {user.id}")
        return user

    async def login(self, email: str, password: str) -> str:
        user = await self.users.get_by_email(email)
        if not user:
            self.hasher.dummy_verify()
            raise InvalidCredentials()
        if not self.hasher.verify(password, user.hashed_password):
            raise InvalidCredentials()
        return self.tokens.issue(str(user.id))

    async def request_otp(self, email: str) -> None:
        """
        OTP 발급 흐름입니다.

        1. 가입된 사용자인지 확인 (없으면 UserNotRegistered)
        2. 기존 OTP가 있으면 삭제 (새 요청이 이전 코드를 대체)
        3. 메일 발송
        4. 발송에 성공한 경우에만 저장

        주니어 개발자님께: 메일 발송이 실패하면 NotificationFailure가 그대로 올라가고
        4번이 실행되지 않으므로, 사용자에게 전달되지 않은 코드가 DB에 남지 않습니다.
        """
        user = await self.users.get_by_email(email)
        if not user:
            raise UserNotRegistered()

        code = generate_otp()
        await self.passcodes.delete_by_email(email)
        await self.notifier.send_passcode(email, code)
        await self.passcodes.put(email, code)
        logger.info(f"[otp] Issued OTP for user {user.id}")

    async def verify_otp(self, code: str, email: str) -> str:
        record = await self.passcodes.find_by_code(code)
        if not record or record.email != email:
            raise InvalidOtp()

        # 1회용: 삭제에 성공한 요청만 토큰을 받습니다
        consumed = await self.passcodes.delete_by_code(code, email)
        if not consumed:
            raise InvalidOtp()

        user = await self.users.get_by_email(email)
        if not user:
            raise InvalidOtp()
        logger.info(f"[otp] OTP verified for user {user.id}")
        return self.tokens.issue(str(user.id))


def get_auth_service(
    users: UserRepository = Depends(UserRepository),
    passcodes: PasscodeRepository = Depends(get_passcode_repository),
    tokens: TokenService = Depends(get_token_service),
    hasher: PasswordHasher = Depends(get_password_hasher),
    notifier: SmtpNotifier = Depends(get_notifier),
) -> AuthService:
    return AuthService(users, passcodes, tokens, hasher, notifier)
