"""
API v1 routes.

Defines REST endpoints for account registration and confirmation.

Handlers are plain functions: FastAPI runs them in its worker thread pool,
one thread per request, since every storage call below is blocking.
"""

from uuid import UUID

from fastapi import APIRouter, Depends, status

from src.api.dependencies import get_registration_service
from src.api.models import ErrorResponse, MessageResponse, RegisterRequest, RegisterResponse
from src.domain.registration import RegistrationService

router = APIRouter(tags=["v1"])


@router.post(
    "/user/register",
    response_model=RegisterResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid registration data"},
        403: {"model": ErrorResponse, "description": "Password lacks a digit or a symbol"},
        409: {"model": ErrorResponse, "description": "Email or username already in use"},
        500: {"model": ErrorResponse, "description": "Internal error"},
    },
    summary="Register a new user",
    description="Create an unconfirmed account. A confirmation link and a 6-digit "
    "security code are delivered through two separate channels.",
)
def register(
    request_data: RegisterRequest,
    service: RegistrationService = Depends(get_registration_service),
) -> RegisterResponse:
    user_id = service.register(request_data.to_domain())
    return RegisterResponse(message="user created successfully", user_id=user_id)


@router.put(
    "/user/confirm-account/{confirmation_code}/{security_code}",
    response_model=MessageResponse,
    responses={
        404: {"model": ErrorResponse, "description": "Unknown or mismatched codes"},
        500: {"model": ErrorResponse, "description": "Internal error"},
    },
    summary="Confirm an account",
    description="Confirm an account with the code from the confirmation link "
    "and the 6-digit security code. Repeating a successful confirmation is not an error.",
)
def confirm_account(
    confirmation_code: UUID,
    security_code: str,
    service: RegistrationService = Depends(get_registration_service),
) -> MessageResponse:
    result = service.confirm(confirmation_code, security_code)
    return MessageResponse(message=result.value)
