# 요청/응답 스키마 정의 (Pydantic 모델)
# - 라우터에 도달하기 전에 필드 단위 검증 (실패 시 422)

from typing import Union
from pydantic import BaseModel, EmailStr, Field, field_validator

class UserCreate(BaseModel):
    name: str = Field(min_length=1)
    email: EmailStr
    password: str = Field(min_length=1)

class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1)

class OtpRequest(BaseModel):
    email: EmailStr

class OtpVerifyRequest(BaseModel):
    otp: str = Field(min_length=1)
    email: EmailStr

    @field_validator("otp", mode="before")
    @classmethod
    def _otp_to_str(cls, v: Union[str, int]):
        # 프론트엔드가 숫자로 보내는 경우도 허용
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v

class UserPublic(BaseModel):
    id: str
    name: str
    email: str

class RegisterResponse(BaseModel):
    message: str
    user: UserPublic

class TokenResponse(BaseModel):
    token: str
    token_type: str = "bearer"

class OtpRequestResponse(BaseModel):
    message: str
    email: str

class OtpVerifyResponse(TokenResponse):
    message: str
