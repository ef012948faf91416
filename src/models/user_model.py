from typing import List, Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

from src.models.base import Gender, Role


class RegisterIn(BaseModel):
    firstName: str = Field(..., min_length=1)
    lastName: str = Field(..., min_length=1)
    email: EmailStr
    password: str = Field(..., min_length=6)
    mobileNumber: str = Field(..., min_length=5)
    gender: Gender = Gender.MALE
    role: Role = Role.STUDENT

    @field_validator("firstName", "lastName", "mobileNumber")
    @classmethod
    def _strip(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v

    @field_validator("role")
    @classmethod
    def _no_self_admin(cls, v: Role) -> Role:
        if v == Role.ADMIN:
            raise ValueError("Admin accounts cannot self-register")
        return v


class VerifyOtpIn(BaseModel):
    email: EmailStr
    otp: str = Field(..., min_length=6, max_length=6)


class LoginIn(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class ForgotPasswordIn(BaseModel):
    email: EmailStr


class ResetPasswordIn(BaseModel):
    resetToken: str = Field(..., min_length=1)
    newPassword: str = Field(..., min_length=6)


class ProfileUpdateIn(BaseModel):
    mobileNumber: Optional[str] = None
    displayName: Optional[str] = None
    profession: Optional[str] = None
    dateOfBirth: Optional[str] = None
    about: Optional[str] = None
    password: Optional[str] = Field(default=None, min_length=6)
    gender: Optional[Gender] = None
    profileImage: Optional[str] = None


class UserOut(BaseModel):
    id: str
    firstName: str
    lastName: str
    email: str
    role: Role
    gender: Optional[Gender] = None
    mobileNumber: Optional[str] = None
    profileImage: Optional[str] = None
    displayName: Optional[str] = None
    profession: Optional[str] = None
    dateOfBirth: Optional[str] = None
    about: Optional[str] = None
    otpVerified: bool = False
    createdCourses: List[str] = Field(default_factory=list)
    enrolledCourses: List[str] = Field(default_factory=list)
