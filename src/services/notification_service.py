# src/services/notification_service.py
import logging
import smtplib
from email.message import EmailMessage
from html import escape

from src.config.settings import Settings


# -------------------- templates --------------------
def otp_email(otp: str) -> str:
    return (
        "<div style='font-family: Arial, sans-serif'>"
        "<h2>Verify your email</h2>"
        f"<p>Your one-time password is <b>{escape(otp)}</b>.</p>"
        "<p>It expires in 5 minutes.</p>"
        "</div>"
    )


def reset_password_email(reset_url: str) -> str:
    return (
        "<div style='font-family: Arial, sans-serif'>"
        "<h2>Reset your password</h2>"
        "<p>Reset your password using the link below:</p>"
        f"<p><a href='{escape(reset_url, quote=True)}'>{escape(reset_url)}</a></p>"
        "<p>The link expires in 15 minutes.</p>"
        "</div>"
    )


def enrollment_email(course_name: str, name: str) -> str:
    return (
        "<div style='font-family: Arial, sans-serif'>"
        f"<h2>Hi {escape(name)},</h2>"
        f"<p>You are now enrolled in <b>{escape(course_name)}</b>.</p>"
        "<p>Happy learning!</p>"
        "</div>"
    )


class NotificationService:
    """Envío de emails por SMTP. Nunca lanza: devuelve True/False."""

    def __init__(self, settings: Settings):
        self.settings = settings

    def send_templated_email(self, to_address: str, subject: str, html_body: str) -> bool:
        msg = EmailMessage()
        msg["From"] = self.settings.mail_from or self.settings.smtp_user
        msg["To"] = to_address
        msg["Subject"] = subject
        msg.set_content("This message requires an HTML-capable email client.")
        msg.add_alternative(html_body, subtype="html")

        try:
            with smtplib.SMTP(self.settings.smtp_host, self.settings.smtp_port, timeout=10) as smtp:
                smtp.starttls()
                if self.settings.smtp_user:
                    smtp.login(self.settings.smtp_user, self.settings.smtp_password)
                smtp.send_message(msg)
            return True
        except (smtplib.SMTPException, OSError) as e:
            logging.error(f"[notification] Error enviando email a {to_address}: {e}")
            return False
