import logging
import os
import smtplib
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart

from app.core.config import settings
from app.utils.retry import with_retry

logger = logging.getLogger(__name__)

TEMPLATE_DIR = os.path.join(os.path.dirname(__file__), '../templates/email')


def email_enabled():
    return bool(settings.SMTP_USERNAME and settings.SMTP_PASSWORD)


def _render(template_name, **values):
    with open(os.path.join(TEMPLATE_DIR, template_name), 'r') as f:
        html_content = f.read()
    for key, value in values.items():
        html_content = html_content.replace('{{ %s }}' % key, str(value))
    return html_content


def _send(to_email, subject, html_content):
    msg = MIMEMultipart('alternative')
    msg['Subject'] = subject
    msg['From'] = f"UDIN <{settings.SENDER_EMAIL}>"
    msg['To'] = to_email
    msg.attach(MIMEText(html_content, 'html'))

    def deliver():
        with smtplib.SMTP(settings.SMTP_SERVER, settings.SMTP_PORT) as server:
            server.starttls()
            server.login(settings.SMTP_USERNAME, settings.SMTP_PASSWORD)
            server.sendmail(settings.SENDER_EMAIL, to_email, msg.as_string())

    with_retry(deliver, exceptions=(smtplib.SMTPException, OSError))


def send_otp_email(to_email, otp_code, expires_minutes=None):
    if not email_enabled():
        logger.warning("SMTP credentials not found. Skipping email send.")
        logger.debug("DEBUG OTP for %s: %s", to_email, otp_code)
        return False

    try:
        html_content = _render(
            'otp.html',
            otp_code=otp_code,
            expires_minutes=expires_minutes or settings.OTP_EXPIRE_MINUTES,
        )
        _send(to_email, "Verify Your Email - UDIN", html_content)
        return True
    except Exception:
        logger.exception("Failed to send OTP email to %s", to_email)
        return False


def send_welcome_email(to_email, name, otp_code, temp_password):
    if not email_enabled():
        logger.warning("SMTP credentials not found. Skipping welcome email send.")
        logger.debug("DEBUG OTP for %s: %s", to_email, otp_code)
        return False

    try:
        html_content = _render(
            'welcome.html',
            name=name,
            otp_code=otp_code,
            temp_password=temp_password,
            site_url=settings.FRONTEND_URL,
        )
        _send(to_email, "Welcome to UDIN - Verify Your Email", html_content)
        return True
    except Exception:
        logger.exception("Failed to send welcome email to %s", to_email)
        return False
