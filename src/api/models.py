"""
API request and response models.

Pydantic models for FastAPI endpoint validation and OpenAPI schema generation.
Only the shape of the body is checked here; the registration rules themselves
(lengths, formats, matching fields) live in the domain so that they report
the domain's 400/403 classification.
"""

from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field

from src.domain.models import CreateUserInput


class RegisterRequest(BaseModel):
    """Request model for user registration."""

    username: str = Field(..., description="Between 5 and 20 characters")
    email: str
    confirm_email: str
    password: str = Field(..., description="At least 8 characters with a digit and a symbol")
    confirm_password: str
    phone_number: Optional[str] = Field(
        default=None, description="Optional, 7 to 15 digits with an optional leading +"
    )

    def to_domain(self) -> CreateUserInput:
        return CreateUserInput(
            username=self.username,
            email=self.email,
            confirm_email=self.confirm_email,
            password=self.password,
            confirm_password=self.confirm_password,
            phone_number=self.phone_number,
        )


class RegisterResponse(BaseModel):
    """Response model for successful registration."""

    message: str
    user_id: UUID


class MessageResponse(BaseModel):
    """Response model carrying a single status message."""

    message: str


class ErrorResponse(BaseModel):
    """Standard error response model."""

    detail: str
