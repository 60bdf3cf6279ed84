# 공용 테스트 픽스처
# - DB/SMTP/Redis 없이 인증 흐름을 검증하기 위한 인메모리 저장소와 가짜 Notifier
# - 설정 모듈이 import 되기 전에 필수 환경변수를 채워 둡니다

import asyncio
import os

os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-with-at-least-32-bytes!!")

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from itertools import count
from typing import Optional

import pytest
from fastapi.testclient import TestClient

from electrokart.core.exceptions import DuplicateEmail, NotificationFailure
from electrokart.core.security import PasswordHasher, TokenService, get_token_service, get_password_hasher
from electrokart.repositories.passcode_repository import passcode_expired, get_passcode_repository
from electrokart.repositories.user_repository import UserRepository
from electrokart.services.auth_service import AuthService
from electrokart.services.notifier import get_notifier

SECRET = "test-secret-key-with-at-least-32-bytes!!"


class FakeClock:
    """테스트에서 시간을 직접 움직이기 위한 시계 (토큰은 aware, OTP 저장소는 naive UTC 사용)"""

    def __init__(self, start: datetime = datetime(2030, 1, 1, 12, 0, 0, tzinfo=timezone.utc)):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def naive(self) -> datetime:
        return self.now.replace(tzinfo=None)

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


@dataclass
class FakeUser:
    id: str
    name: str
    email: str
    hashed_password: str = field(repr=False)


@dataclass
class FakePasscode:
    email: str
    code: str
    created_at: datetime


class InMemoryUserRepository:
    def __init__(self):
        self.by_email = {}
        self._ids = count(1)

    async def get_by_email(self, email: str) -> Optional[FakeUser]:
        return self.by_email.get(email)

    async def create(self, name: str, email: str, hashed_password: str) -> FakeUser:
        if email in self.by_email:
            raise DuplicateEmail()
        user = FakeUser(id=f"{next(self._ids):024x}", name=name, email=email, hashed_password=hashed_password)
        self.by_email[email] = user
        return user

    async def get(self, user_id: str) -> Optional[FakeUser]:
        return next((u for u in self.by_email.values() if u.id == user_id), None)


class InMemoryPasscodeRepository:
    def __init__(self, clock, ttl_seconds: int = 600):
        self.records = {}
        self.ttl_seconds = ttl_seconds
        self._clock = clock

    def _live(self, record: FakePasscode) -> bool:
        return not passcode_expired(record.created_at, self._clock(), self.ttl_seconds)

    async def put(self, email: str, code: str) -> None:
        self.records[email] = FakePasscode(email=email, code=code, created_at=self._clock())

    async def find_by_code(self, code: str) -> Optional[FakePasscode]:
        matches = [r for r in self.records.values() if r.code == code and self._live(r)]
        # 조회와 삭제 사이에 다른 요청이 끼어들 수 있도록 한 번 양보
        await asyncio.sleep(0)
        return max(matches, key=lambda r: r.created_at, default=None)

    async def find_by_email(self, email: str) -> Optional[FakePasscode]:
        record = self.records.get(email)
        return record if record and self._live(record) else None

    async def delete_by_email(self, email: str) -> None:
        self.records.pop(email, None)

    async def delete_by_code(self, code: str, email: Optional[str] = None) -> bool:
        for key, record in list(self.records.items()):
            if record.code == code and (email is None or record.email == email) and self._live(record):
                del self.records[key]
                return True
        return False

    async def purge_expired(self) -> int:
        expired = [k for k, r in self.records.items() if not self._live(r)]
        for key in expired:
            del self.records[key]
        return len(expired)


class FakeNotifier:
    def __init__(self):
        self.sent = []
        self.fail = False

    async def send_passcode(self, email: str, code: str) -> None:
        if self.fail:
            raise NotificationFailure()
        self.sent.append((email, code))

    def last_code(self, email: str) -> str:
        return [c for e, c in self.sent if e == email][-1]


@pytest.fixture
def clock():
    return FakeClock()

@pytest.fixture
def users():
    return InMemoryUserRepository()

@pytest.fixture
def passcodes(clock):
    return InMemoryPasscodeRepository(clock.naive)

@pytest.fixture
def notifier():
    return FakeNotifier()

@pytest.fixture
def tokens(clock):
    return TokenService(secret_key=SECRET, expires_in=3600, clock=clock)

@pytest.fixture
def hasher():
    # 테스트 속도를 위해 최소 cost 사용
    return PasswordHasher(rounds=4)

@pytest.fixture
def service(users, passcodes, tokens, hasher, notifier):
    return AuthService(users, passcodes, tokens, hasher, notifier)

@pytest.fixture
def client(users, passcodes, tokens, hasher, notifier):
    from electrokart.main import app

    app.dependency_overrides[UserRepository] = lambda: users
    app.dependency_overrides[get_passcode_repository] = lambda: passcodes
    app.dependency_overrides[get_token_service] = lambda: tokens
    app.dependency_overrides[get_password_hasher] = lambda: hasher
    app.dependency_overrides[get_notifier] = lambda: notifier
    # with 블록 없이 생성하면 startup 이벤트(MongoDB 연결)가 실행되지 않습니다
    yield TestClient(app)
    app.dependency_overrides.clear()
