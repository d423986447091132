"""
E-mail and Slack alerts for runs that halt or end partially wired.
"""

import logging
import smtplib
from datetime import datetime
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Optional

import requests

logger = logging.getLogger(__name__)


class AlertNotifier:
    def __init__(
        self,
        slack_webhook: Optional[str] = None,
        smtp_server: str = "smtp.gmail.com",
        smtp_port: int = 587,
        smtp_username: Optional[str] = None,
        smtp_password: Optional[str] = None,
        notification_email: Optional[str] = None,
    ):
        self.slack_webhook = slack_webhook
        self.smtp_server = smtp_server
        self.smtp_port = smtp_port
        self.smtp_username = smtp_username
        self.smtp_password = smtp_password
        self.notification_email = notification_email

    @classmethod
    def from_settings(cls, settings) -> "AlertNotifier":
        return cls(
            slack_webhook=settings.slack_webhook,
            smtp_server=settings.smtp_server,
            smtp_port=settings.smtp_port,
            smtp_username=settings.smtp_username,
            smtp_password=settings.smtp_password,
            notification_email=settings.notification_email,
        )

    @property
    def email_enabled(self) -> bool:
        return bool(self.smtp_username and self.smtp_password and self.notification_email)

    @property
    def enabled(self) -> bool:
        return self.email_enabled or bool(self.slack_webhook)

    def notify_run(self, report) -> bool:
        """Sends an alert when the run halted or left units partially wired."""
        if report.ok:
            return False
        state = "HALTED" if report.halted else "PARTIAL"
        subject = f"Deployment {state} on {report.network.name}"
        self.send(subject, report.summary())
        return True

    def send(self, subject: str, message: str) -> None:
        """Send alert via email and/or Slack"""
        logger.error(f"ALERT: {subject}")

        # A failed alert channel never masks the run result
        if self.email_enabled:
            try:
                self._send_email_alert(subject, message)
            except (smtplib.SMTPException, OSError) as e:
                logger.error(f"Failed to send email alert: {e}")

        if self.slack_webhook:
            try:
                self._send_slack_alert(subject, message)
            except requests.RequestException as e:
                logger.error(f"Failed to send Slack alert: {e}")

    def _send_email_alert(self, subject: str, message: str) -> None:
        msg = MIMEMultipart()
        msg["From"] = self.smtp_username
        msg["To"] = self.notification_email
        msg["Subject"] = subject

        body = f"""
        Tai Deployment Alert

        Time: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}

        {message}
        """
        msg.attach(MIMEText(body, "plain"))

        server = smtplib.SMTP(self.smtp_server, self.smtp_port)
        try:
            server.starttls()
            server.login(self.smtp_username, self.smtp_password)
            server.send_message(msg)
        finally:
            server.quit()

    def _send_slack_alert(self, subject: str, message: str) -> None:
        payload = {
            "text": f"🚨 {subject}",
            "attachments": [{"text": message}],
        }
        response = requests.post(self.slack_webhook, json=payload, timeout=10)
        response.raise_for_status()
