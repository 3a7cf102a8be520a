"""
Email utility functions
"""
import re
import time
from pathlib import Path

from flask_mail import Mail, Message
from flask import current_app

mail = Mail()


def send_email(to, subject, html):
    """
    Send an email. Returns True on success, False on failure (failure is logged).

    Uses SMTP through Flask-Mail when MAIL_SERVER is configured; otherwise the
    message is written to MAIL_OUTBOX_DIR for local development.
    """
    if not to:
        current_app.logger.error("Refusing to send email without a recipient")
        return False

    if not current_app.config.get('MAIL_SERVER'):
        return _write_to_outbox(to, subject, html)

    msg = Message(subject=subject, recipients=[to], html=html)
    try:
        mail.send(msg)
    except Exception as e:
        current_app.logger.error(f"SMTP error sending email to {to}: {str(e)}", exc_info=True)
        return False
    return True


def _write_to_outbox(to, subject, html):
    outbox = Path(current_app.config['MAIL_OUTBOX_DIR'])
    safe_to = re.sub(r'[^a-z0-9@.]', '_', to, flags=re.IGNORECASE)
    path = outbox / f"{int(time.time() * 1000)}-{safe_to}.html"
    try:
        outbox.mkdir(parents=True, exist_ok=True)
        path.write_text(f"To: {to}\nSubject: {subject}\n\n{html}", encoding="utf-8")
    except OSError as e:
        current_app.logger.error(f"Could not write email for {to} to outbox: {str(e)}", exc_info=True)
        return False
    current_app.logger.info("Email written to %s", path)
    return True


def send_verification_email(user):
    """Send the account verification link to a freshly registered (or resending) user."""
    verify_url = f"{current_app.config['APP_BASE_URL']}/verify.html?token={user.verification_token}"
    subject = "Verify your Euro Arcade account"
    html = _verification_email_html(user.display_name or "there", verify_url)
    return send_email(user.email, subject, html)


def _verification_email_html(name: str, verify_url: str) -> str:
    """Clean HTML template for the verification email."""
    return f"""
    <!DOCTYPE html>
    <html>
    <head><meta charset="utf-8"><title>Verify Your Email</title></head>
    <body style="font-family: system-ui, sans-serif; max-width: 480px; margin: 0 auto; padding: 24px;">
        <h2 style="color: #1a1a2e;">Welcome to Euro Arcade</h2>
        <p>Hi {name},</p>
        <p>Please verify your email address by clicking the button below.</p>
        <p style="margin: 24px 0;">
            <a href="{verify_url}"
               style="display: inline-block; padding: 12px 24px; background-color: #2563eb; color: white; text-decoration: none; border-radius: 6px; font-weight: bold;">
                Verify email
            </a>
        </p>
        <p style="color: #666;">Or copy and paste this link into your browser:</p>
        <p style="color: #999; font-size: 12px; word-break: break-all;">{verify_url}</p>
        <p style="color: #666;">This link will expire in 24 hours.</p>
        <hr style="border: none; border-top: 1px solid #eee; margin: 24px 0;">
        <p style="font-size: 12px; color: #999;">If you did not create this account, you can ignore this email.</p>
    </body>
    </html>
    """
