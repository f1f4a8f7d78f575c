"""
API request and response models.

Pydantic models for FastAPI endpoint validation and OpenAPI schema generation.
Email and password rules are enforced by the domain service so that every
operation reports malformed input the same way.
"""

from pydantic import BaseModel, Field


class SignupInitRequest(BaseModel):
    """Request model for starting a signup."""

    email: str = Field(..., min_length=1, description="Email address to register")
    password: str = Field(..., min_length=1, description="Password (min 6 characters)")


class VerifySignupRequest(BaseModel):
    """Request model for verifying a signup code."""

    email: str = Field(..., min_length=1)
    code: str = Field(..., min_length=1, description="6-digit verification code")


class ResendOtpRequest(BaseModel):
    """Request model for resending a verification code."""

    email: str = Field(..., min_length=1)


class LoginRequest(BaseModel):
    """
    Request model for password login.

    Empty values are accepted here so that every failed login, malformed
    or not, gets the same InvalidCredentials answer from the service.
    """

    email: str
    password: str


class StatusResponse(BaseModel):
    """Response model for operations that send a code."""

    success: bool = True
    message: str
    email: str


class UserResponse(BaseModel):
    """Public account identity."""

    id: str
    email: str


class AuthResponse(BaseModel):
    """Response model for operations that issue a token."""

    success: bool = True
    message: str
    token: str
    user: UserResponse


class ErrorResponse(BaseModel):
    """Standard error response model."""

    success: bool = False
    detail: str


class InvalidCodeResponse(ErrorResponse):
    """Error response for a wrong verification code."""

    attempts_left: int
