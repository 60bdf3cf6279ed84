# OTP 메일 발송 (Notifier)
# - SMTP로 평문 메일 한 통을 보냅니다 (Gmail 등)
# - smtplib는 동기 라이브러리이므로 스레드풀에서 실행해 이벤트 루프를 막지 않습니다
# - 발송 실패는 NotificationFailure로 감싸서 올립니다 (재시도하지 않음)

import logging
import smtplib
from email.mime.text import MIMEText
from functools import lru_cache

from starlette.concurrency import run_in_threadpool

from ..core.config import settings
from ..core.exceptions import NotificationFailure

logger = logging.getLogger(__name__)


class SmtpNotifier:
    def __init__(
        self,
        host: str,
        port: int,
        sender: str,
        user: str = "",
        password: str = "",
        use_tls: bool = True,
        timeout: float = 10.0,
        subject: str = "Electrokart Login OTP",
    ):
        self.host = host
        self.port = port
        self.sender = sender
        self.user = user
        self.password = password
        self.use_tls = use_tls
        self.timeout = timeout
        self.subject = subject

    def _send_email(self, to_email: str, subject: str, body: str):
        msg = MIMEText(body, "plain", "utf-8")
        msg["Subject"] = subject
        msg["From"] = self.sender
        msg["To"] = to_email

        server = smtplib.SMTP(self.host, self.port, timeout=self.timeout)
        try:
            if self.use_tls:
                server.starttls()
            if self.user and self.password:
                server.login(self.user, self.password)
            server.sendmail(self.sender, [to_email], msg.as_string())
        finally:
            server.quit()

    async def send_passcode(self, email: str, code: str) -> None:
        body = f"Your OTP to login to Electrokart is: {code}"
        try:
            await run_in_threadpool(self._send_email, email, self.subject, body)
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"[mail] Failed to send OTP: {e}", exc_info=True)
            raise NotificationFailure() from e
        logger.info("[mail] OTP sent")


@lru_cache
def get_notifier() -> SmtpNotifier:
    return SmtpNotifier(
        host=settings.SMTP_HOST,
        port=settings.SMTP_PORT,
        sender=settings.SMTP_FROM,
        user=settings.SMTP_USER,
        password=settings.SMTP_PASSWORD,
        use_tls=settings.SMTP_TLS,
        timeout=settings.SMTP_TIMEOUT_SECONDS,
        subject=settings.OTP_MAIL_SUBJECT,
    )
