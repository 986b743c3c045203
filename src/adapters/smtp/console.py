"""
Console confirmation sender adapter - Implements ConfirmationSender protocol.

This module provides a console-based implementation of the domain's
confirmation delivery port, logging both confirmation factors for demo
purposes.
"""

import logging
from uuid import UUID

logger = logging.getLogger(__name__)


class ConsoleConfirmationSender:
    """
    Implements ConfirmationSender protocol via console logging.

    Uses structural subtyping - no explicit inheritance from Protocol.
    Stands in for two channels: an emailed link and a second message
    (SMS when a phone number was given) carrying the security code.
    """

    def __init__(self, link_template: str = "/v1/user/confirm-account/{confirmation_code}") -> None:
        self._link_template = link_template

    def send_confirmation_link(self, email: str, confirmation_code: UUID) -> None:
        """
        Log the confirmation link (simulates email delivery).

        Args:
            email: Recipient email address
            confirmation_code: Confirmation challenge identifier
        """
        link = self._link_template.format(confirmation_code=confirmation_code)
        logger.info("[CONFIRMATION LINK] To: %s Link: %s", email, link)

    def send_security_code(self, recipient: str, security_code: str) -> None:
        """
        Log the security code (simulates SMS or second email).

        Args:
            recipient: Phone number, or email when none was given
            security_code: 6-digit security code
        """
        logger.info("[SECURITY CODE] To: %s Code: %s", recipient, security_code)
