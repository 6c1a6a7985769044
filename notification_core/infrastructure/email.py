"""Secondary email channel for notification records, sent through SendGrid."""

from __future__ import annotations

import html
import json
import logging
from typing import Any

from anyio import to_thread
from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import Mail

from notification_core.config import get_settings
from notification_core.domain.entities import NotificationRecord

logger = logging.getLogger(__name__)


def _describe_sendgrid_body(body: Any) -> str | None:
    """Turn a SendGrid error payload into a short readable description."""

    if isinstance(body, bytes):
        body = body.decode("utf-8", errors="replace")
    if isinstance(body, str):
        body = body.strip()
        if not body:
            return None
        try:
            body = json.loads(body)
        except json.JSONDecodeError:
            return body
    if not body:
        return None

    if isinstance(body, dict) and isinstance(body.get("errors"), list):
        messages = [
            str(item["message"])
            for item in body["errors"]
            if isinstance(item, dict) and item.get("message")
        ]
        if messages:
            return "; ".join(messages)
    try:
        return json.dumps(body)
    except (TypeError, ValueError):
        return str(body)


def _log_failure(status_code: Any, body: Any, recipient: str) -> None:
    details = _describe_sendgrid_body(body)
    if details:
        logger.error(
            "SendGrid rejected email to %s with status %s: %s", recipient, status_code, details
        )
    else:
        logger.error("SendGrid rejected email to %s with status %s", recipient, status_code)


def send_email(subject: str, html_content: str, recipient: str) -> bool:
    """Send one email; return ``False`` when unconfigured or rejected."""

    settings = get_settings()
    if not (settings.sendgrid_api_key and settings.sendgrid_sender):
        logger.info("SendGrid configuration incomplete; skipping email delivery")
        return False

    message = Mail(
        from_email=settings.sendgrid_sender,
        to_emails=recipient,
        subject=subject,
        html_content=html_content,
    )

    try:
        response = SendGridAPIClient(settings.sendgrid_api_key).send(message)
    except Exception as exc:  # noqa: BLE001
        status_code = getattr(exc, "status_code", None)
        if status_code is None:
            logger.exception("Error sending email to %s via SendGrid", recipient)
        else:
            _log_failure(status_code, getattr(exc, "body", None), recipient)
        return False

    status_code = getattr(response, "status_code", None)
    if not isinstance(status_code, int) or not 200 <= status_code < 300:
        _log_failure(status_code, getattr(response, "body", None), recipient)
        return False
    return True


def render_notification_email(record: NotificationRecord) -> str:
    """Plain HTML body carrying the record title and message."""

    return (
        f"<h2>{html.escape(record.title)}</h2>"
        f"<p>{html.escape(record.message)}</p>"
    )


async def send_notification_email(record: NotificationRecord, recipient: str) -> bool:
    """Email ``record`` to ``recipient`` without blocking the event loop."""

    return await to_thread.run_sync(
        send_email, record.title, render_notification_email(record), recipient
    )


__all__ = ["render_notification_email", "send_email", "send_notification_email"]
