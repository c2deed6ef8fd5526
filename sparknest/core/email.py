import asyncio
import logging

import aiohttp

from .config import settings
from .errors import DeliveryFailed

logger = logging.getLogger(__name__)

BREVO_SEND_URL = "https://api.brevo.com/v3/smtp/email"


def _render_html(otp_code: str) -> str:
    return f"""
    <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
        <div style="background: linear-gradient(135deg, #8b5cf6 0%, #a855f7 100%); padding: 40px 20px; text-align: center; border-radius: 8px 8px 0 0;">
            <h1 style="color: white; margin: 0; font-size: 28px;">{settings.EMAIL_FROM_NAME}</h1>
            <p style="color: rgba(255,255,255,0.9); margin: 10px 0 0 0;">Your Verification Code</p>
        </div>
        <div style="background: white; padding: 40px 20px; border-radius: 0 0 8px 8px; border: 1px solid #e5e7eb;">
            <h2 style="color: #374151; margin: 0 0 20px 0;">Welcome to {settings.EMAIL_FROM_NAME}!</h2>
            <p style="color: #6b7280; line-height: 1.6; margin: 0 0 30px 0;">
                Thank you for signing up! Please use the verification code below to complete your registration:
            </p>
            <div style="background: #f9fafb; border: 2px solid #8b5cf6; border-radius: 8px; padding: 20px; text-align: center; margin: 30px 0;">
                <h1 style="color: #8b5cf6; font-size: 32px; letter-spacing: 8px; margin: 0; font-family: monospace;">{otp_code}</h1>
            </div>
            <p style="color: #6b7280; line-height: 1.6; margin: 30px 0 0 0; font-size: 14px;">
                This code will expire in {settings.OTP_EXPIRE_MINUTES} minutes. If you didn't request this verification, please ignore this email.
            </p>
        </div>
    </div>
    """


def _render_text(otp_code: str) -> str:
    return f"""
Welcome to {settings.EMAIL_FROM_NAME}!

Your verification code is: {otp_code}

This code will expire in {settings.OTP_EXPIRE_MINUTES} minutes.

If you didn't request this verification, please ignore this email.

---
{settings.EMAIL_FROM_NAME}
    """


async def send_verification_code(to_email: str, otp_code: str):
    """Send an email-verification code via Brevo API. Raises DeliveryFailed; never retries."""
    if not settings.BREVO_API_KEY:
        logger.warning("[DEV MODE] BREVO_API_KEY not set, OTP for %s: %s", to_email, otp_code)
        return

    headers = {
        "api-key": settings.BREVO_API_KEY,
        "Content-Type": "application/json",
    }
    payload = {
        "sender": {
            "name": settings.EMAIL_FROM_NAME,
            "email": settings.EMAIL_FROM_ADDRESS,
        },
        "to": [{"email": to_email}],
        "subject": f"{settings.EMAIL_FROM_NAME} - Email Verification Code",
        "htmlContent": _render_html(otp_code),
        "textContent": _render_text(otp_code),
    }

    try:
        timeout = aiohttp.ClientTimeout(total=15)
        async with aiohttp.ClientSession(timeout=timeout) as session:
            async with session.post(BREVO_SEND_URL, json=payload, headers=headers) as response:
                # Error bodies from Brevo or an upstream proxy are not always JSON
                body = await response.text(errors="replace")
                if response.status != 201:
                    logger.error("Brevo rejected email to %s: status=%s body=%s", to_email, response.status, body[:500])
                    raise DeliveryFailed()
                logger.info("Verification code sent to %s, response=%s", to_email, body[:200])
    except (aiohttp.ClientError, asyncio.TimeoutError) as e:
        logger.error("Failed to send verification code to %s: %s", to_email, e)
        raise DeliveryFailed() from e
