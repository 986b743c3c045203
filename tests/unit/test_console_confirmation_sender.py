"""
Unit tests for ConsoleConfirmationSender adapter.

Tests verify the console sender satisfies the ConfirmationSender protocol
and logs each confirmation factor on its own line.
"""

import logging
from uuid import UUID

import pytest

from src.adapters.smtp.console import ConsoleConfirmationSender
from src.domain.ports import ConfirmationSender

CONFIRMATION_CODE = UUID("01890a5d-ac96-774b-bcce-b302099a8058")


class TestConsoleConfirmationSender:
    """Tests for console delivery of both factors."""

    def test_no_explicit_inheritance(self) -> None:
        """ConsoleConfirmationSender uses structural subtyping, not inheritance."""
        assert ConsoleConfirmationSender.__bases__ == (object,)

        def accepts_sender(sender: ConfirmationSender) -> None:
            pass

        accepts_sender(ConsoleConfirmationSender())

    def test_logs_confirmation_link(self, caplog: pytest.LogCaptureFixture) -> None:
        sender = ConsoleConfirmationSender()

        with caplog.at_level(logging.INFO):
            sender.send_confirmation_link("user@example.com", CONFIRMATION_CODE)

        assert "[CONFIRMATION LINK] To: user@example.com" in caplog.text
        assert f"/v1/user/confirm-account/{CONFIRMATION_CODE}" in caplog.text

    def test_logs_security_code(self, caplog: pytest.LogCaptureFixture) -> None:
        sender = ConsoleConfirmationSender()

        with caplog.at_level(logging.INFO):
            sender.send_security_code("+1234567", "004217")

        assert "[SECURITY CODE] To: +1234567 Code: 004217" in caplog.text

    def test_factors_are_logged_separately(self, caplog: pytest.LogCaptureFixture) -> None:
        sender = ConsoleConfirmationSender()

        with caplog.at_level(logging.INFO):
            sender.send_confirmation_link("user@example.com", CONFIRMATION_CODE)
            sender.send_security_code("user@example.com", "004217")

        link_record, code_record = caplog.records
        assert "004217" not in link_record.getMessage()
        assert str(CONFIRMATION_CODE) not in code_record.getMessage()

    def test_custom_link_template(self, caplog: pytest.LogCaptureFixture) -> None:
        sender = ConsoleConfirmationSender("https://accounts.example.com/confirm/{confirmation_code}")

        with caplog.at_level(logging.INFO):
            sender.send_confirmation_link("user@example.com", CONFIRMATION_CODE)

        assert f"https://accounts.example.com/confirm/{CONFIRMATION_CODE}" in caplog.text
