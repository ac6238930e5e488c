# catalog_service/notifier.py - one-time code delivery over SendGrid / Twilio
import logging

from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import Mail as SendGridMail
from twilio.rest import Client as TwilioClient

from .config import CatalogConfig

logger = logging.getLogger(__name__)


def is_email(identifier: str) -> bool:
    return "@" in identifier


def send_otp_email(email: str, otp: str) -> bool:
    if not CatalogConfig.SENDGRID_API_KEY or not CatalogConfig.MAIL_FROM_EMAIL:
        logger.info("SendGrid not configured. OTP for %s: %s", email, otp)
        return False

    message = SendGridMail(
        from_email=CatalogConfig.MAIL_FROM_EMAIL,
        to_emails=email,
        subject="Your login code",
        html_content=f"<h1>Login code</h1><p>Code: {otp}</p>"
        f"<p>It expires in {CatalogConfig.OTP_EXPIRE_MINUTES} minutes.</p>",
    )

    try:
        response = SendGridAPIClient(CatalogConfig.SENDGRID_API_KEY).send(message)
        logger.info("Email sent to %s, status: %s", email, response.status_code)
        return True
    except Exception as e:
        logger.error("Error sending email via SendGrid: %s", e)
        return False


def send_otp_sms(phone_number: str, otp: str) -> bool:
    if not all(
        [
            CatalogConfig.TWILIO_ACCOUNT_SID,
            CatalogConfig.TWILIO_AUTH_TOKEN,
            CatalogConfig.TWILIO_PHONE_NUMBER,
        ]
    ):
        logger.info("Twilio not configured. OTP for SMS %s: %s", phone_number, otp)
        return False
    try:
        client = TwilioClient(CatalogConfig.TWILIO_ACCOUNT_SID, CatalogConfig.TWILIO_AUTH_TOKEN)
        client.messages.create(
            to=phone_number, from_=CatalogConfig.TWILIO_PHONE_NUMBER, body=f"OTP: {otp}"
        )
        logger.info("SMS sent to %s", phone_number)
        return True
    except Exception as e:
        logger.error("Error sending SMS via Twilio: %s", e)
        return False


def deliver_code(identifier: str, otp: str) -> bool:
    """Send ``otp`` to ``identifier`` over the matching channel.

    Returns True when a channel accepted the message. Failures are logged and
    never raised: the code stays valid and can be requested again.
    """
    if is_email(identifier):
        return send_otp_email(identifier, otp)
    return send_otp_sms(identifier, otp)
