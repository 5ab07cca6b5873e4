import logging
import smtplib
from email.message import EmailMessage
from typing import Any, Callable, Dict, Optional, Protocol, Tuple

import httpx
import pycountry
from translitua import translit
from unidecode import unidecode

from config import Settings
from repositories.order_repository import OrderRepository
from .constants import DEFAULT_LANGUAGE, UKRAINIAN_COUNTRY_CODES
from .messages import MESSAGES
from .models import Address, Order

logger = logging.getLogger("order-panel")


def country_name(code: str) -> str:
    normalized = (code or "").strip().upper()
    if not normalized:
        return ""
    country = pycountry.countries.get(alpha_2=normalized) or pycountry.countries.get(alpha_3=normalized)
    if country:
        return getattr(country, "name", "") or getattr(country, "official_name", "")
    return ""


def language_from_country(country_code: Optional[str]) -> str:
    normalized = (country_code or "").strip().upper()
    if normalized in UKRAINIAN_COUNTRY_CODES:
        return "uk"
    return DEFAULT_LANGUAGE


def _is_latin_name(name: str) -> bool:
    if not name:
        return False
    allowed = set("abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ -'\".")
    return all(ch in allowed for ch in name)


def normalize_name(name: str, country_code: Optional[str] = None) -> str:
    if not name:
        return "-"
    name_str = str(name).strip()
    if _is_latin_name(name_str):
        return name_str
    if (country_code or "").strip().upper() in UKRAINIAN_COUNTRY_CODES:
        return translit(name_str)
    return unidecode(name_str)


def format_shipping_label(address: Address) -> str:
    country = country_name(address.country_code) or address.country_code.upper()
    lines = [
        normalize_name(address.full_name, address.country_code),
        unidecode(address.line1),
    ]
    if address.line2:
        lines.append(unidecode(address.line2))
    lines.append(f"{address.postal_code} {unidecode(address.city)}")
    lines.append(country)
    return "\n".join(lines)


def render_message(key: str, lang: str, **fields: Any) -> Tuple[str, str]:
    msgs = MESSAGES.get(lang) or MESSAGES[DEFAULT_LANGUAGE]
    template = msgs.get(key) or MESSAGES[DEFAULT_LANGUAGE][key]
    return template["subject"].format(**fields), template["body"].format(**fields)


class Notifier(Protocol):
    channel: str

    def send(self, recipient: str, subject: str, body: str) -> None:
        ...


class ConsoleNotifier:
    channel = "console"

    def send(self, recipient: str, subject: str, body: str) -> None:
        print(f"[NOTIFY]{recipient}: {subject}\n{body}")


class LogNotifier:
    channel = "log"

    def send(self, recipient: str, subject: str, body: str) -> None:
        logger.info("notify recipient=%s subject=%s", recipient, subject)


class EmailSender:
    channel = "email"

    def __init__(
        self,
        host: str,
        port: int,
        sender: str,
        *,
        smtp_factory: Callable[..., smtplib.SMTP] = smtplib.SMTP,
    ) -> None:
        self.host = host
        self.port = port
        self.sender = sender
        self._smtp_factory = smtp_factory

    def send(self, recipient: str, subject: str, body: str) -> None:
        message = EmailMessage()
        message["From"] = self.sender
        message["To"] = recipient
        message["Subject"] = subject
        message.set_content(body)
        with self._smtp_factory(self.host, self.port, timeout=10) as smtp:
            smtp.send_message(message)


class WebhookNotifier:
    channel = "webhook"

    def __init__(self, url: str, *, client: Optional[httpx.Client] = None) -> None:
        self.url = url
        self._client = client

    def send(self, recipient: str, subject: str, body: str) -> None:
        payload = {"recipient": recipient, "subject": subject, "body": body}
        if self._client is not None:
            response = self._client.post(self.url, json=payload)
        else:
            with httpx.Client(timeout=10) as client:
                response = client.post(self.url, json=payload)
        response.raise_for_status()


def create_notifier(settings: Settings) -> Notifier:
    channel = settings.notification_channel
    if channel == "console":
        return ConsoleNotifier()
    if channel == "log":
        return LogNotifier()
    if channel == "email":
        return EmailSender(settings.smtp_host, settings.smtp_port, settings.smtp_sender)
    if channel == "webhook":
        if not settings.webhook_url:
            raise RuntimeError("NOTIFICATION_CHANNEL=webhook requires WEBHOOK_URL")
        return WebhookNotifier(settings.webhook_url)
    raise RuntimeError(f"Unknown notification channel: {channel}")


def notify_customer(
    notifier: Notifier,
    repository: OrderRepository,
    order: Order,
    key: str,
    **fields: Any,
) -> bool:
    lang = language_from_country(order.customer.country_code)
    context: Dict[str, Any] = {
        "name": normalize_name(order.customer.name, order.customer.country_code),
        "order_id": order.order_id,
        "total": order.pricing.total,
    }
    context.update(fields)
    subject, body = render_message(key, lang, **context)
    try:
        notifier.send(order.customer.email, subject, body)
    except Exception as exc:
        logger.warning("notify failed order=%s key=%s channel=%s: %s", order.order_id, key, notifier.channel, exc)
        repository.log_action(
            order.order_id,
            f"notify:{key}",
            request={"channel": notifier.channel, "subject": subject},
            response={"error": str(exc)},
            status="error",
        )
        return False
    repository.log_action(
        order.order_id,
        f"notify:{key}",
        request={"channel": notifier.channel, "subject": subject},
    )
    return True
