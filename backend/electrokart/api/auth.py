# 인증 라우터
# - 회원가입: POST /api/auth/register
# - 로그인: POST /api/auth/login
# - OTP 요청: POST /api/auth/login/otp
# - OTP 검증: POST /api/auth/login/otp/verify
# - 내 정보: GET /api/auth/me (Bearer 토큰 필요)

from fastapi import APIRouter, Depends, status

from ..schemas.user_schema import (
    UserCreate,
    LoginRequest,
    OtpRequest,
    OtpVerifyRequest,
    UserPublic,
    RegisterResponse,
    TokenResponse,
    OtpRequestResponse,
    OtpVerifyResponse,
)
from ..services.auth_service import AuthService, get_auth_service
from ..core.security import get_current_user
from ..models.user import User

router = APIRouter(prefix="/auth", tags=["auth"])

def _public(user) -> UserPublic:
    return UserPublic(id=str(user.id), name=user.name, email=user.email)

@router.post("/register", status_code=status.HTTP_201_CREATED, response_model=RegisterResponse, summary="회원가입 (이메일 중복 체크 포함)")
async def register(payload: UserCreate, service: AuthService = Depends(get_auth_service)):
    user = await service.register(payload.name, payload.email, payload.password)
    return RegisterResponse(message="User registered successfully", user=_public(user))

@router.post("/login", response_model=TokenResponse, summary="비밀번호 로그인 (JWT 토큰 발급)")
async def login(payload: LoginRequest, service: AuthService = Depends(get_auth_service)):
    token = await service.login(payload.email, payload.password)
    return TokenResponse(token=token)

@router.post("/login/otp", status_code=status.HTTP_201_CREATED, response_model=OtpRequestResponse, summary="OTP 메일 발송")
async def request_otp(payload: OtpRequest, service: AuthService = Depends(get_auth_service)):
    await service.request_otp(payload.email)
    return OtpRequestResponse(message="Otp successfully sent", email=payload.email)

@router.post("/login/otp/verify", status_code=status.HTTP_201_CREATED, response_model=OtpVerifyResponse, summary="OTP 검증 (JWT 토큰 발급)")
async def verify_otp(payload: OtpVerifyRequest, service: AuthService = Depends(get_auth_service)):
    token = await service.verify_otp(payload.otp, payload.email)
    return OtpVerifyResponse(message="Otp successfully verified", token=token)

@router.get("/me", response_model=UserPublic, summary="현재 로그인한 사용자 (로그인 필요)")
async def me(user: User = Depends(get_current_user)):
    return _public(user)
