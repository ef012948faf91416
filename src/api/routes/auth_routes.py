from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, status

from src.api.dependencies import get_auth_service, get_current_user, get_session_token
from src.models.base import ok
from src.models.user_model import (
    ForgotPasswordIn,
    LoginIn,
    ProfileUpdateIn,
    RegisterIn,
    ResetPasswordIn,
    VerifyOtpIn,
)
from src.services.auth_service import AuthService

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.post("/register", status_code=status.HTTP_201_CREATED)
def register(payload: RegisterIn, auth: AuthService = Depends(get_auth_service)):
    message = auth.register(payload.model_dump(mode="json"))
    return ok(message)


@router.post("/verify-otp")
def verify_otp(payload: VerifyOtpIn, auth: AuthService = Depends(get_auth_service)):
    auth.verify_otp(payload.email, payload.otp)
    return ok("OTP verified successfully")


@router.post("/login")
def login(payload: LoginIn, auth: AuthService = Depends(get_auth_service)):
    """Devuelve un token de sesión guardado en Redis (usar como `Authorization: Bearer`)."""
    return ok("Login successfully!", auth.login(payload.email, payload.password))


@router.post("/logout")
def logout(
    token: Optional[str] = Depends(get_session_token),
    user: Dict[str, Any] = Depends(get_current_user),
    auth: AuthService = Depends(get_auth_service),
):
    auth.logout(token)
    return ok("Logged out")


@router.post("/forgot-password")
def forgot_password(payload: ForgotPasswordIn, auth: AuthService = Depends(get_auth_service)):
    auth.forgot_password(payload.email)
    return ok("Password reset email sent successfully!")


@router.post("/reset-password")
def reset_password(payload: ResetPasswordIn, auth: AuthService = Depends(get_auth_service)):
    auth.reset_password(payload.resetToken, payload.newPassword)
    return ok("Password has been successfully reset!")


@router.get("/me")
def my_profile(user: Dict[str, Any] = Depends(get_current_user), auth: AuthService = Depends(get_auth_service)):
    return ok("Profile retrieved successfully", auth.get_profile(user["_id"]))


@router.put("/me")
def update_profile(
    payload: ProfileUpdateIn,
    user: Dict[str, Any] = Depends(get_current_user),
    auth: AuthService = Depends(get_auth_service),
):
    updated = auth.update_profile(user["_id"], payload.model_dump(mode="json", exclude_none=True))
    return ok("Profile updated successfully", updated)
