"""
FastAPI dependencies - Dependency injection factories.

This module provides Depends() factories for injecting
domain services and infrastructure adapters into routes.
"""

from collections.abc import Callable
from functools import partial

from fastapi import Request
from psycopg_pool import ConnectionPool

from src.adapters.repository.unit_of_work import PostgresUnitOfWork
from src.adapters.smtp.console import ConsoleConfirmationSender
from src.config.settings import get_settings
from src.domain.credentials import CredentialTools
from src.domain.registration import RegistrationService

# Module-level singleton - ConsoleConfirmationSender is stateless
_confirmation_sender = ConsoleConfirmationSender()


def get_pool(request: Request) -> ConnectionPool:
    """
    Get connection pool from app state.

    The pool is created during app lifespan startup and stored in app.state.
    """
    return request.app.state.pool


def get_unit_of_work_factory(request: Request) -> Callable[[], PostgresUnitOfWork]:
    """Factory producing one fresh Unit of Work per business operation."""
    return partial(PostgresUnitOfWork, get_pool(request))


def get_credential_tools() -> CredentialTools:
    settings = get_settings()
    return CredentialTools(
        time_cost=settings.argon2_time_cost,
        memory_cost=settings.argon2_memory_cost,
        parallelism=settings.argon2_parallelism,
        hash_length=settings.argon2_hash_length,
    )


def get_confirmation_sender() -> ConsoleConfirmationSender:
    """Get console confirmation sender (singleton)."""
    return _confirmation_sender


def get_registration_service(request: Request) -> RegistrationService:
    """
    Create registration service with injected dependencies.

    Wires together the Unit of Work factory, credential tooling and
    confirmation sender for the domain service.
    """
    return RegistrationService(
        unit_of_work_factory=get_unit_of_work_factory(request),
        credentials=get_credential_tools(),
        confirmation_sender=get_confirmation_sender(),
        salt_length=get_settings().salt_length,
    )
