from authapp.schemas.user import UserAuthResponse, UserOut, UserUpdateRequest
from authapp.schemas.auth import (
    SignupRequest, LoginRequest, GoogleAuthRequest, ForgotPasswordRequest,
    ResetPasswordRequest, AuthResponse, GoogleAuthResponse, ForgotPasswordResponse,
    MessageResponse,
)
from authapp.schemas.content import GenerateContentRequest, ContentOut
