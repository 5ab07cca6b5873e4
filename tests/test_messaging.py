import httpx
import pytest

from conftest import FailingNotifier, as_order_create, digital_payload
from config import Settings
from services.order_processing.messaging import (
    ConsoleNotifier,
    EmailSender,
    LogNotifier,
    WebhookNotifier,
    create_notifier,
    format_shipping_label,
    language_from_country,
    normalize_name,
    notify_customer,
    render_message,
)
from services.order_processing.models import Address


def test_language_follows_customer_country():
    assert language_from_country("UA") == "uk"
    assert language_from_country("ukr") == "uk"
    assert language_from_country("PL") == "en"
    assert language_from_country(None) == "en"


def test_render_message_falls_back_to_english():
    subject, body = render_message("order_cancelled", "de", name="Jane", order_id="42")

    assert subject == "Order 42 cancelled"
    assert "Jane" in body


def test_normalize_name():
    assert normalize_name("Jane Doe") == "Jane Doe"
    assert normalize_name("Олена Коваленко", "UA") == "Olena Kovalenko"
    assert normalize_name("Łukasz Żółw", "PL") == "Lukasz Zolw"
    assert normalize_name("") == "-"


def test_shipping_label_is_ascii():
    label = format_shipping_label(
        Address(
            full_name="Zoë Müller",
            line1="Hauptstraße 5",
            city="München",
            postal_code="80331",
            country_code="DE",
        )
    )

    assert label.splitlines() == ["Zoe Muller", "Hauptstrasse 5", "80331 Munchen", "Germany"]


def test_email_sender_sends_one_message():
    delivered = []

    class FakeSMTP:
        def __init__(self, host, port, timeout):
            self.host = host
            self.port = port

        def __enter__(self):
            return self

        def __exit__(self, *exc_info):
            return False

        def send_message(self, message):
            delivered.append(message)

    sender = EmailSender("smtp.test", 2525, "shop@example.com", smtp_factory=FakeSMTP)
    sender.send("jane@example.com", "Hello", "Body text")

    assert len(delivered) == 1
    message = delivered[0]
    assert message["To"] == "jane@example.com"
    assert message["From"] == "shop@example.com"
    assert message["Subject"] == "Hello"
    assert message.get_content().strip() == "Body text"


def test_webhook_notifier_posts_json():
    requests = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(204)

    client = httpx.Client(transport=httpx.MockTransport(handler))
    WebhookNotifier("https://hooks.test/orders", client=client).send("jane@example.com", "Hi", "There")

    assert len(requests) == 1
    assert requests[0].url == "https://hooks.test/orders"
    assert b'"subject":"Hi"' in requests[0].content.replace(b" ", b"")


def test_webhook_notifier_raises_on_server_error():
    client = httpx.Client(transport=httpx.MockTransport(lambda request: httpx.Response(500)))
    with pytest.raises(httpx.HTTPStatusError):
        WebhookNotifier("https://hooks.test/orders", client=client).send("a@b.co", "s", "b")


def test_console_notifier_prints(capsys):
    ConsoleNotifier().send("jane@example.com", "Subject", "Body")

    assert "[NOTIFY]jane@example.com: Subject" in capsys.readouterr().out


def test_create_notifier_by_channel():
    assert isinstance(create_notifier(Settings(notification_channel="log")), LogNotifier)
    assert isinstance(create_notifier(Settings(notification_channel="console")), ConsoleNotifier)
    assert isinstance(create_notifier(Settings(notification_channel="email")), EmailSender)
    assert isinstance(
        create_notifier(Settings(notification_channel="webhook", webhook_url="https://hooks.test")),
        WebhookNotifier,
    )
    with pytest.raises(RuntimeError):
        create_notifier(Settings(notification_channel="webhook", webhook_url=None))
    with pytest.raises(RuntimeError):
        create_notifier(Settings(notification_channel="pigeon"))


def test_notifier_failure_is_logged_not_raised(processor, repository):
    order = processor.place_order(as_order_create(digital_payload()))

    delivered = notify_customer(FailingNotifier(), repository, order, "order_cancelled")

    assert delivered is False
    entry = repository.fetch_log(order.order_id)[-1]
    assert entry["action"] == "notify:order_cancelled"
    assert entry["status"] == "error"
    assert entry["response"] == {"error": "mail server unreachable"}
