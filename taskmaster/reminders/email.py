from dataclasses import dataclass
from html import escape
from typing import Any, Dict, Optional

import httpx


class EmailDeliveryError(Exception):
    def __init__(self, message: str, status_code: Optional[int] = None, body: Any = None):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


@dataclass
class EmailMessage:
    to: str
    from_email: str
    from_name: str
    subject: str
    html: str


class SendGridClient:
    """Thin client for the SendGrid v3 mail/send endpoint."""

    def __init__(
        self,
        api_key: str,
        api_url: str = "https://api.sendgrid.com/v3/mail/send",
        timeout: float = 20.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.api_key = api_key
        self.api_url = api_url
        self.timeout = timeout
        self.transport = transport

    def _payload(self, message: EmailMessage) -> Dict[str, Any]:
        return {
            "personalizations": [{"to": [{"email": message.to}]}],
            "from": {"email": message.from_email, "name": message.from_name},
            "subject": message.subject,
            "content": [{"type": "text/html", "value": message.html}],
        }

    def send(self, message: EmailMessage) -> None:
        if not self.api_key:
            raise EmailDeliveryError("SendGrid API key missing")

        headers = {"Authorization": f"Bearer {self.api_key}"}
        try:
            with httpx.Client(timeout=self.timeout, transport=self.transport) as client:
                r = client.post(self.api_url, json=self._payload(message), headers=headers)
        except httpx.HTTPError as e:
            raise EmailDeliveryError(f"SendGrid request failed: {e!r}") from e

        if r.status_code >= 300:
            try:
                body = r.json()
            except ValueError:
                body = r.text
            raise EmailDeliveryError(f"SendGrid error {r.status_code}", status_code=r.status_code, body=body)


# --- templates ---

def task_reminder_subject(title: str) -> str:
    return f'⏰ Reminder: "{title}" is due soon'


def task_reminder_html(app_name: str, title: str, formatted_due: str, status: Optional[str], priority: Optional[str] = None) -> str:
    lines = [
        f'<h2 style="color:#4f46e5;">{escape(app_name)}</h2>',
        "<p>Hi there,</p>",
        f'<p>Your task <strong>"{escape(title)}"</strong> is due at <strong>{escape(formatted_due)}</strong>.</p>',
        f"<p>Priority: <strong>{escape(str(priority))}</strong></p>" if priority else "",
        f"<p>Status: <strong>{escape(str(status or ''))}</strong></p>",
        "<p>Please make sure to complete it on time!</p>",
        "<hr/>",
        f'<p style="font-size:12px;color:#777;">This is an automated reminder from {escape(app_name)}.</p>',
    ]
    return "".join(line for line in lines if line)


def plan_reminder_subject(title: str) -> str:
    return f'📅 Reminder: "{title}" is coming up'


def plan_reminder_html(app_name: str, title: str, formatted_start: str, agenda: str = "", where: str = "") -> str:
    lines = [
        f'<h2 style="color:#4f46e5;">{escape(app_name)}</h2>',
        "<p>Hi there,</p>",
        "<p>This is a reminder that you have an upcoming plan:</p>",
        f"<p><strong>{escape(title)}</strong></p>",
        f"<p><strong>Agenda:</strong> {escape(agenda)}</p>" if agenda else "",
        f"<p><strong>Where:</strong> {escape(where)}</p>" if where else "",
        f"<p><strong>When:</strong> {escape(formatted_start)}</p>",
        "<p>Good luck, and stay productive! 🚀</p>",
        "<hr/>",
        f'<p style="font-size:12px;color:#777;">This is an automated planner reminder from {escape(app_name)}.</p>',
    ]
    return "".join(line for line in lines if line)
