"""
API v1 routes.

Defines REST endpoints for the OTP signup and login API. Domain errors
propagate to the handlers registered in src.api.errors. Endpoints are
plain functions so FastAPI runs the blocking bcrypt and database work in
its threadpool, one request per worker.
"""

from fastapi import APIRouter, Depends, status

from src.api.dependencies import get_client_id, get_signup_service
from src.api.models import (
    AuthResponse,
    ErrorResponse,
    InvalidCodeResponse,
    LoginRequest,
    ResendOtpRequest,
    SignupInitRequest,
    StatusResponse,
    UserResponse,
    VerifySignupRequest,
)
from src.domain.ports import AuthResult
from src.domain.signup import SignupService

router = APIRouter(tags=["v1"])


def _auth_response(message: str, result: AuthResult) -> AuthResponse:
    return AuthResponse(
        message=message,
        token=result.token,
        user=UserResponse(id=result.account.id, email=result.account.email),
    )


@router.post(
    "/signup-init",
    response_model=StatusResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid email or password"},
        409: {"model": ErrorResponse, "description": "Account already exists"},
        429: {"model": ErrorResponse, "description": "Too many requests"},
        502: {"model": ErrorResponse, "description": "Code could not be delivered"},
    },
    summary="Start signup",
    description="Submit email and password. A 6-digit verification code valid for "
    "10 minutes is emailed; calling again restarts the challenge.",
)
def signup_init(
    request_data: SignupInitRequest,
    client_id: str = Depends(get_client_id),
    service: SignupService = Depends(get_signup_service),
) -> StatusResponse:
    """
    Start a signup and send a verification code.

    - **email**: Email address to register
    - **password**: Password (minimum 6 characters)
    """
    email = service.signup_init(request_data.email, request_data.password, client_id)
    return StatusResponse(message="Verification code sent to your email", email=email)


@router.post(
    "/verify-signup",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": InvalidCodeResponse, "description": "Invalid verification code"},
        404: {"model": ErrorResponse, "description": "Code expired or invalid"},
        409: {"model": ErrorResponse, "description": "Account already exists"},
        429: {"model": ErrorResponse, "description": "Too many failed attempts"},
    },
    summary="Verify signup code",
    description="Submit the emailed code to create the account and receive a bearer token.",
)
def verify_signup(
    request_data: VerifySignupRequest,
    service: SignupService = Depends(get_signup_service),
) -> AuthResponse:
    result = service.verify_signup(request_data.email, request_data.code)
    return _auth_response("Account created successfully!", result)


@router.post(
    "/resend-otp",
    response_model=StatusResponse,
    responses={
        404: {"model": ErrorResponse, "description": "No pending signup"},
        429: {"model": ErrorResponse, "description": "Too many requests"},
        502: {"model": ErrorResponse, "description": "Code could not be delivered"},
    },
    summary="Resend verification code",
    description="Replace the code of a pending signup. The previous code stops working.",
)
def resend_otp(
    request_data: ResendOtpRequest,
    client_id: str = Depends(get_client_id),
    service: SignupService = Depends(get_signup_service),
) -> StatusResponse:
    email = service.resend_otp(request_data.email, client_id)
    return StatusResponse(message="New verification code sent to your email", email=email)


@router.post(
    "/login",
    response_model=AuthResponse,
    responses={
        401: {"model": ErrorResponse, "description": "Invalid email or password"},
    },
    summary="Log in",
    description="Exchange email and password for a bearer token.",
)
def login(
    request_data: LoginRequest,
    service: SignupService = Depends(get_signup_service),
) -> AuthResponse:
    result = service.login(request_data.email, request_data.password)
    return _auth_response("Login successful", result)
