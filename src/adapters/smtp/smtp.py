"""
SMTP email sender adapter - Implements EmailSender protocol over STARTTLS.

Builds a multipart/alternative message (plain text + HTML) carrying the
verification code. Delivery errors are logged and reported as False;
retrying is left to the user (resend).
"""

import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formataddr

logger = logging.getLogger(__name__)

SUBJECT = "Your verification code"

PLAIN_TEMPLATE = (
    "Your verification code is: {code}\n\n"
    "This code is valid for {minutes} minutes. Never share this code with anyone.\n"
    "If you didn't request this code, you can ignore this email.\n"
)

HTML_TEMPLATE = """\
<!DOCTYPE html>
<html>
  <body style="font-family: Arial, sans-serif; color: #333;">
    <h2>Verification required</h2>
    <p>Hello {name},</p>
    <p>Use the code below to complete your registration:</p>
    <p style="font-size: 32px; font-weight: bold; letter-spacing: 6px;">{code}</p>
    <p>Valid for {minutes} minutes.</p>
    <p style="color: #b91c1c;">Never share this code with anyone.</p>
    <p style="color: #666; font-size: 12px;">
      If you didn't request this code, you can ignore this email.
    </p>
  </body>
</html>
"""


def build_message(
    sender: str, recipient: str, code: str, ttl_minutes: int
) -> MIMEMultipart:
    """Render the verification email for one recipient."""
    msg = MIMEMultipart("alternative")
    msg["Subject"] = SUBJECT
    msg["From"] = sender
    msg["To"] = recipient

    name = recipient.split("@")[0]
    msg.attach(MIMEText(PLAIN_TEMPLATE.format(code=code, minutes=ttl_minutes), "plain", "utf-8"))
    msg.attach(
        MIMEText(HTML_TEMPLATE.format(code=code, minutes=ttl_minutes, name=name), "html", "utf-8")
    )
    return msg


class SmtpEmailSender:
    """
    Implements EmailSender protocol via smtplib.

    Opens one authenticated STARTTLS connection per message.
    """

    def __init__(
        self,
        host: str,
        port: int,
        username: str,
        password: str,
        from_address: str,
        from_name: str = "",
        timeout: float = 15.0,
        ttl_minutes: int = 10,
    ) -> None:
        self._host = host
        self._port = port
        self._username = username
        self._password = password
        self._from_address = from_address
        self._sender = formataddr((from_name, from_address)) if from_name else from_address
        self._timeout = timeout
        self._ttl_minutes = ttl_minutes

    def _connect(self) -> smtplib.SMTP:
        conn = smtplib.SMTP(self._host, self._port, timeout=self._timeout)
        conn.ehlo()
        conn.starttls()
        conn.ehlo()
        if self._username:
            conn.login(self._username, self._password)
        return conn

    def send_verification_code(self, email: str, code: str) -> bool:
        msg = build_message(self._sender, email, code, self._ttl_minutes)
        try:
            with self._connect() as conn:
                conn.sendmail(self._from_address, [email], msg.as_string())
        except (smtplib.SMTPException, OSError) as e:
            logger.error("Failed to send verification email to %s: %s", email, e)
            return False

        logger.info("Verification email sent to %s", email)
        return True

    def check_connection(self) -> bool:
        """Open and close a connection; used by the health check."""
        try:
            with self._connect() as conn:
                conn.noop()
        except (smtplib.SMTPException, OSError):
            return False
        return True
