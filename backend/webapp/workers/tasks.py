"""ARQ background tasks for user notifications."""
from typing import Dict, Any
from urllib.parse import urlencode

import httpx
from arq import Retry

from webapp.config import settings
from webapp.utils.logger import logger


def build_verification_link(email: str, token: str) -> str:
    """Link the user clicks to verify their email address."""
    query = urlencode({"email": email, "token": token})
    return f"{settings.verification_base_url.rstrip('/')}/v1/user/verify?{query}"


def render_verification_email(payload: Dict[str, Any]) -> Dict[str, Any]:
    """Build the mail relay request body for a registration message."""
    link = build_verification_link(payload["email"], payload["token"])
    name = f"{payload.get('firstName', '')} {payload.get('lastName', '')}".strip() or payload["email"]
    ttl = settings.verification_token_ttl_seconds
    return {
        "from": settings.mail_from,
        "to": [payload["email"]],
        "subject": "Verify your email address",
        "text": (
            f"Hello {name},\n\n"
            f"Please verify your email address by opening the link below. "
            f"It expires in {ttl} seconds.\n\n{link}\n"
        ),
    }


async def send_verification_email(ctx: Dict[str, Any], payload: Dict[str, Any]) -> Dict[str, Any]:
    """
    Deliver the verification email for a newly registered user.

    Args:
        ctx: ARQ context (holds the shared httpx client)
        payload: {email, firstName, lastName, token}

    Returns:
        Dict with success status and details
    """
    if not settings.mail_api_url:
        logger.warning(f"Mail relay not configured, dropping verification email for {payload.get('email')}")
        return {"success": False, "error": "Mail relay not configured"}

    client: httpx.AsyncClient = ctx["http_client"]
    headers = {"Authorization": f"Bearer {settings.mail_api_key}"} if settings.mail_api_key else {}

    try:
        response = await client.post(
            settings.mail_api_url,
            json=render_verification_email(payload),
            headers=headers,
        )
    except httpx.HTTPError as e:
        logger.error(f"Mail relay unreachable for {payload.get('email')}: {e}")
        raise Retry(defer=ctx.get("job_try", 1) * 5)

    if response.status_code >= 500:
        logger.error(f"Mail relay error {response.status_code} for {payload.get('email')}")
        raise Retry(defer=ctx.get("job_try", 1) * 5)

    if response.status_code >= 400:
        logger.error(f"Mail relay rejected message for {payload.get('email')}: {response.status_code} - {response.text}")
        return {"success": False, "error": f"Rejected: {response.status_code}"}

    logger.info(f"Verification email sent to {payload.get('email')}")
    return {"success": True, "email": payload.get("email")}
