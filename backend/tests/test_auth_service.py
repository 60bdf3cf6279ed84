# 인증 서비스 유닛 테스트 (인메모리 저장소 + 가짜 Notifier)
import asyncio
import pytest

from electrokart.core.exceptions import (
    DuplicateEmail,
    InvalidCredentials,
    InvalidOtp,
    NotificationFailure,
    UserNotRegistered,
    ValidationError,
)
from electrokart.services.auth_service import generate_otp


def _register(service, email="a@x.com", password="p", name="A"):
    return asyncio.run(service.register(name, email, password))


def test_register_then_login_returns_verifiable_token(service, tokens):
    user = _register(service)
    assert user.hashed_password != "p"
    token = asyncio.run(service.login("a@x.com", "p"))
    assert tokens.verify(token) == user.id

def test_register_duplicate_email(service):
    _register(service)
    with pytest.raises(DuplicateEmail):
        _register(service, name="B")

@pytest.mark.parametrize("name,email,password", [("", "a@x.com", "p"), ("A", "  ", "p"), ("A", "a@x.com", None)])
def test_register_missing_field(service, users, name, email, password):
    with pytest.raises(ValidationError):
        asyncio.run(service.register(name, email, password))
    assert users.by_email == {}

def test_wrong_password_and_unknown_email_look_the_same(service):
    _register(service)
    with pytest.raises(InvalidCredentials) as wrong_pw:
        asyncio.run(service.login("a@x.com", "wrong"))
    with pytest.raises(InvalidCredentials) as unknown:
        asyncio.run(service.login("nobody@x.com", "p"))
    assert wrong_pw.value.message == unknown.value.message
    assert wrong_pw.value.status_code == unknown.value.status_code

def test_generate_otp_is_six_digits():
    for _ in range(200):
        code = generate_otp()
        assert len(code) == 6
        assert 100000 <= int(code) <= 999999

def test_request_otp_for_unknown_user(service, notifier, passcodes):
    with pytest.raises(UserNotRegistered):
        asyncio.run(service.request_otp("nobody@x.com"))
    assert notifier.sent == []
    assert passcodes.records == {}

def test_otp_login_flow(service, notifier, passcodes, tokens):
    user = _register(service)
    asyncio.run(service.request_otp("a@x.com"))
    assert len(notifier.sent) == 1
    code = notifier.last_code("a@x.com")
    assert passcodes.records["a@x.com"].code == code

    token = asyncio.run(service.verify_otp(code, "a@x.com"))
    assert tokens.verify(token) == user.id
    assert passcodes.records == {}

def test_otp_is_one_shot(service, notifier):
    _register(service)
    asyncio.run(service.request_otp("a@x.com"))
    code = notifier.last_code("a@x.com")
    asyncio.run(service.verify_otp(code, "a@x.com"))
    with pytest.raises(InvalidOtp):
        asyncio.run(service.verify_otp(code, "a@x.com"))

def test_second_request_supersedes_first(service, notifier, passcodes, monkeypatch):
    codes = iter(["111111", "222222"])
    monkeypatch.setattr("electrokart.services.auth_service.generate_otp", lambda: next(codes))
    _register(service)
    asyncio.run(service.request_otp("a@x.com"))
    asyncio.run(service.request_otp("a@x.com"))

    assert len(passcodes.records) == 1
    assert passcodes.records["a@x.com"].code == "222222"
    with pytest.raises(InvalidOtp):
        asyncio.run(service.verify_otp("111111", "a@x.com"))
    assert asyncio.run(service.verify_otp("222222", "a@x.com"))

def test_otp_expires_at_ttl_boundary(service, notifier, clock):
    _register(service)
    asyncio.run(service.request_otp("a@x.com"))
    code = notifier.last_code("a@x.com")
    clock.advance(600)
    with pytest.raises(InvalidOtp):
        asyncio.run(service.verify_otp(code, "a@x.com"))

def test_otp_still_valid_just_before_ttl(service, notifier, clock):
    _register(service)
    asyncio.run(service.request_otp("a@x.com"))
    code = notifier.last_code("a@x.com")
    clock.advance(599)
    assert asyncio.run(service.verify_otp(code, "a@x.com"))

def test_otp_cannot_be_used_for_another_account(service, notifier, passcodes):
    _register(service)
    _register(service, email="b@x.com", name="B")
    asyncio.run(service.request_otp("a@x.com"))
    code = notifier.last_code("a@x.com")
    with pytest.raises(InvalidOtp):
        asyncio.run(service.verify_otp(code, "b@x.com"))
    # 다른 계정의 시도로 원래 코드가 소비되지 않아야 함
    assert "a@x.com" in passcodes.records

def test_notification_failure_persists_nothing(service, notifier, passcodes):
    _register(service)
    notifier.fail = True
    with pytest.raises(NotificationFailure):
        asyncio.run(service.request_otp("a@x.com"))
    assert passcodes.records == {}

def test_notification_failure_drops_previous_code(service, notifier, passcodes):
    _register(service)
    asyncio.run(service.request_otp("a@x.com"))
    old = notifier.last_code("a@x.com")
    notifier.fail = True
    with pytest.raises(NotificationFailure):
        asyncio.run(service.request_otp("a@x.com"))
    with pytest.raises(InvalidOtp):
        asyncio.run(service.verify_otp(old, "a@x.com"))

def test_concurrent_verify_only_one_wins(service, notifier, passcodes):
    _register(service)
    asyncio.run(service.request_otp("a@x.com"))
    code = notifier.last_code("a@x.com")

    async def _race():
        return await asyncio.gather(
            service.verify_otp(code, "a@x.com"),
            service.verify_otp(code, "a@x.com"),
            return_exceptions=True,
        )

    results = asyncio.run(_race())
    assert sum(isinstance(r, str) for r in results) == 1
    assert sum(isinstance(r, InvalidOtp) for r in results) == 1
