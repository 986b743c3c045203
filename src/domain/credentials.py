"""
Credential tooling - identifiers, salts, security codes and password hashes.

Stateless apart from the Argon2 parameters. The only I/O is the operating
system's secure random source.
"""

import secrets
from dataclasses import dataclass
from uuid import UUID

from argon2.low_level import Type, hash_secret_raw
from uuid6 import uuid7

from .exceptions import GenerationError

SECURITY_CODE_SPACE = 1_000_000


@dataclass(frozen=True)
class CredentialTools:
    """
    Implements CredentialGenerator protocol.

    Defaults are the Argon2id parameters every stored hash is produced with:
    3 passes, 64 MiB, 4 lanes, 32-byte output.
    """

    time_cost: int = 3
    memory_cost: int = 64 * 1024  # KiB
    parallelism: int = 4
    hash_length: int = 32

    def new_identifier(self) -> UUID:
        """Time-ordered UUIDv7."""
        try:
            return uuid7()
        except Exception as e:
            raise GenerationError(
                "Error occurred while generating new UUID",
                operation="CredentialTools.new_identifier",
                child_error=e,
            ) from e

    def new_salt(self, length: int) -> bytes:
        """Fill length bytes from the secure random source."""
        try:
            return secrets.token_bytes(length)
        except (OSError, ValueError) as e:
            raise GenerationError(
                "Error occurred while generating salt",
                operation="CredentialTools.new_salt",
                argument=f"length: {length}",
                child_error=e,
            ) from e

    def hash_password(self, plaintext: str, salt: bytes) -> bytes:
        """Deterministic Argon2id hash of plaintext under salt."""
        return hash_secret_raw(
            secret=plaintext.encode(),
            salt=salt,
            time_cost=self.time_cost,
            memory_cost=self.memory_cost,
            parallelism=self.parallelism,
            hash_len=self.hash_length,
            type=Type.ID,
        )

    def new_security_code(self) -> str:
        """
        Six decimal digits, zero-padded.

        Returned as a string to preserve leading zeros.
        """
        return f"{secrets.randbelow(SECURITY_CODE_SPACE):06d}"
