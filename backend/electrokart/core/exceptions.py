# 커스텀 예외 클래스 정의
# 주니어 개발자님께: 인증 흐름에서 발생하는 실패를 예외 타입으로 구분해 두면
# 라우터에서는 예외 핸들러 하나로 HTTP 상태 코드를 결정할 수 있습니다.
# 서비스 레이어는 HTTPException을 직접 알 필요가 없습니다.

class AuthServiceError(Exception):
    """인증 서비스 관련 기본 예외 클래스

    Attributes:
        status_code: 라우터에서 응답할 HTTP 상태 코드
        message: 클라이언트에게 전달할 메시지
    """
    status_code: int = 400
    default_message: str = "Authentication error"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(AuthServiceError):
    """필수 입력값이 없거나 형식이 잘못된 경우 (클라이언트 오류, 재시도 불필요)

    Attributes:
        field_name: 검증 실패한 필드 이름
    """
    status_code = 422
    default_message = "Invalid input"

    def __init__(self, field_name: str, message: str = None):
        self.field_name = field_name
        super().__init__(message or f"Field '{field_name}' is required")


class DuplicateEmail(AuthServiceError):
    status_code = 409
    default_message = "Email already registered"


class InvalidCredentials(AuthServiceError):
    # 이메일 없음 / 비밀번호 불일치를 구분하지 않습니다 (계정 열거 방지)
    status_code = 401
    default_message = "Invalid credentials"


class InvalidOtp(AuthServiceError):
    status_code = 401
    default_message = "Invalid OTP"


class UserNotRegistered(AuthServiceError):
    status_code = 401
    default_message = "User not registered"


class NotificationFailure(AuthServiceError):
    """OTP 메일 발송 실패. 일시적 오류이므로 클라이언트가 OTP 요청 전체를 다시 시도하면 됩니다."""
    status_code = 500
    default_message = "Failed to send OTP"


class TokenError(AuthServiceError):
    """세션 토큰 검증 실패의 기본 클래스. 모두 재인증이 필요합니다."""
    status_code = 401
    default_message = "Could not validate credentials"


class TokenExpired(TokenError):
    default_message = "Token expired"


class TokenMalformed(TokenError):
    default_message = "Malformed token"


class TokenBadSignature(TokenError):
    default_message = "Invalid token signature"
