"""
Console email sender - EmailSender for local development.

Writes the verification code to the application log instead of
delivering mail, so a developer can complete signup without an SMTP
server. Selected with EMAIL_BACKEND=console.
"""

import logging

logger = logging.getLogger(__name__)


class ConsoleEmailSender:
    """
    Log-only EmailSender.

    Structural subtyping - satisfies the port without inheriting from it.
    """

    def __init__(self, ttl_minutes: int = 10) -> None:
        self.ttl_minutes = ttl_minutes

    def send_verification_code(self, email: str, code: str) -> bool:
        """
        Log the code at INFO level and report success.

        Args:
            email: Normalized recipient address
            code: 6-digit verification code

        Returns:
            True; writing a log line has no delivery failure mode
        """
        logger.info(
            "[VERIFICATION] Email: %s Code: %s (expires in %d minutes)",
            email,
            code,
            self.ttl_minutes,
        )
        return True
