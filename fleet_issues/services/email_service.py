import logging
from pathlib import Path
from typing import Optional

import httpx
from jinja2 import Environment, FileSystemLoader, select_autoescape

from fleet_issues.core.config import Settings

logger = logging.getLogger(__name__)

RESEND_ENDPOINT = "https://api.resend.com/emails"

# --- TEMPLATE SETUP ---
BASE_DIR = Path(__file__).resolve().parent.parent
TEMPLATE_FOLDER = Path(BASE_DIR, "templates")
env = Environment(
    loader=FileSystemLoader(str(TEMPLATE_FOLDER)),
    autoescape=select_autoescape(["html"]),
)


class EmailDeliveryError(Exception):
    pass


def render_password_reset(settings: Settings, reset_link: str) -> str:
    template = env.get_template("password_reset.html")
    return template.render(
        project_name=settings.PROJECT_NAME,
        reset_link=reset_link,
        expires_hours=settings.RESET_TOKEN_EXPIRE_HOURS,
    )


async def send_email(
    settings: Settings,
    to: str,
    subject: str,
    html_content: str,
    client: Optional[httpx.AsyncClient] = None,
) -> None:
    payload = {
        "from": settings.MAIL_FROM,
        "to": [to],
        "subject": subject,
        "html": html_content,
    }
    headers = {"Authorization": f"Bearer {settings.RESEND_API_KEY}", "Content-Type": "application/json"}

    if client is None:
        async with httpx.AsyncClient(timeout=10.0) as own_client:
            response = await own_client.post(RESEND_ENDPOINT, json=payload, headers=headers)
    else:
        response = await client.post(RESEND_ENDPOINT, json=payload, headers=headers)

    if response.is_success:
        logger.info("✅ Email sent to %s", to)
        return

    logger.error(f"❌ Email API error: {response.status_code} - {response.text}")
    raise EmailDeliveryError(f"Email send failed with status {response.status_code}")


async def send_password_reset_email(
    settings: Settings,
    to: str,
    reset_link: str,
    client: Optional[httpx.AsyncClient] = None,
) -> None:
    if not settings.RESEND_API_KEY:
        # Local development: nothing to send through, surface the link instead
        logger.info("[Email not configured - reset link] to=%s link=%s", to, reset_link)
        return

    html_content = render_password_reset(settings, reset_link)
    subject = f"Reset your password - {settings.PROJECT_NAME}"
    await send_email(settings, to, subject, html_content, client=client)
