import html
import logging
import smtplib
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart

from app.config import get_settings

settings = get_settings()
logger = logging.getLogger(__name__)

PRODUCT_NAME = "Student Management System"


def send_verification_email(to_email: str, name: str, verification_token: str) -> bool:
    """Send a student account verification link.

    Returns True if email was sent successfully, False otherwise.
    """
    verification_url = f"{settings.frontend_url}/verify-student?token={verification_token}"
    safe_name = html.escape(name)
    hours = settings.verification_token_expire_hours

    subject = f"Student Account Verification - {PRODUCT_NAME}"
    html_body = f"""
    <!DOCTYPE html>
    <html>
    <head>
        <style>
            body {{ font-family: Arial, sans-serif; }}
            .container {{ max-width: 600px; margin: 0 auto; padding: 20px; }}
            .button {{
                display: inline-block;
                padding: 12px 30px;
                background-color: #4F46E5;
                color: white;
                text-decoration: none;
                border-radius: 5px;
                margin: 20px 0;
            }}
            .footer {{ color: #666; font-size: 12px; margin-top: 30px; }}
        </style>
    </head>
    <body>
        <div class="container">
            <h2 style="color: #4F46E5;">Student Account Verification</h2>
            <p>Dear {safe_name},</p>
            <p>Thank you for registering with our {PRODUCT_NAME}. Please verify your student account to complete your registration.</p>
            <a href="{verification_url}" class="button">Verify My Account</a>
            <p>Or copy and paste this link into your browser:</p>
            <p style="word-break: break-all;">{verification_url}</p>
            <p><strong>This link will expire in {hours} hours.</strong></p>
            <div class="footer">
                <p>If you didn't create this account, you can safely ignore this email.</p>
                <p>{PRODUCT_NAME}</p>
            </div>
        </div>
    </body>
    </html>
    """

    text_body = f"""
    Dear {name},

    Please verify your student account by opening the link below:

    {verification_url}

    This link will expire in {hours} hours.

    If you didn't create this account, you can safely ignore this email.
    """

    return _send_email(to_email, subject, html_body, text_body)


def send_password_reset_email(to_email: str, name: str, reset_token: str) -> bool:
    """Send a password reset link.

    Returns True if email was sent successfully, False otherwise.
    """
    reset_url = f"{settings.frontend_url}/reset-password?token={reset_token}"
    safe_name = html.escape(name or "User")
    hours = settings.reset_token_expire_hours
    expiry_text = "1 hour" if hours == 1 else f"{hours} hours"

    subject = f"Password Reset Request - {PRODUCT_NAME}"
    html_body = f"""
    <!DOCTYPE html>
    <html>
    <head>
        <style>
            body {{ font-family: Arial, sans-serif; }}
            .container {{ max-width: 600px; margin: 0 auto; padding: 20px; }}
            .button {{
                display: inline-block;
                padding: 12px 30px;
                background-color: #DC2626;
                color: white;
                text-decoration: none;
                border-radius: 5px;
                margin: 20px 0;
            }}
            .footer {{ color: #666; font-size: 12px; margin-top: 30px; }}
        </style>
    </head>
    <body>
        <div class="container">
            <h2 style="color: #DC2626;">Password Reset Request</h2>
            <p>Dear {safe_name},</p>
            <p>You have requested to reset your password for the {PRODUCT_NAME}.</p>
            <a href="{reset_url}" class="button">Reset My Password</a>
            <p>Or copy and paste this link into your browser:</p>
            <p style="word-break: break-all;">{reset_url}</p>
            <p><strong>This link will expire in {expiry_text}.</strong></p>
            <div class="footer">
                <p>If you didn't request this password reset, please ignore this email and your password will remain unchanged.</p>
                <p>{PRODUCT_NAME}</p>
            </div>
        </div>
    </body>
    </html>
    """

    text_body = f"""
    Dear {name or 'User'},

    Reset your password by opening the link below:

    {reset_url}

    This link will expire in {expiry_text}.

    If you didn't request this password reset, please ignore this email.
    """

    return _send_email(to_email, subject, html_body, text_body)


def _send_email(to_email: str, subject: str, html_body: str, text_body: str) -> bool:
    """Send an email via SMTP. Returns True on success."""
    if not settings.smtp_user or not settings.smtp_password:
        logger.warning("SMTP credentials not configured, skipping email send")
        return False

    msg = MIMEMultipart("alternative")
    msg["Subject"] = subject
    msg["From"] = settings.from_email or settings.smtp_user
    msg["To"] = to_email

    msg.attach(MIMEText(text_body, "plain"))
    msg.attach(MIMEText(html_body, "html"))

    try:
        with smtplib.SMTP(settings.smtp_host, settings.smtp_port) as server:
            server.starttls()
            server.login(settings.smtp_user, settings.smtp_password)
            server.send_message(msg)
        logger.info(f"Email sent to {to_email}: {subject[:50]}")
        return True
    except Exception as e:
        logger.error(f"Failed to send email to {to_email}: {e}")
        return False
