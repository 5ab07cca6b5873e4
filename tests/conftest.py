import os
from datetime import timedelta
from decimal import Decimal
from typing import Any, Dict, List, Optional

import pytest
from cryptography.fernet import Fernet

os.environ.setdefault("ENCRYPTION_KEY", Fernet.generate_key().decode("utf-8"))
os.environ.setdefault("ORDER_STORE", "memory")
os.environ.setdefault("NOTIFICATION_CHANNEL", "log")

from payment_methods import create_payment_strategy  # noqa: E402
from repositories.order_repository import InMemoryOrderRepository  # noqa: E402
from schemas import OrderCreate  # noqa: E402
from services.order_processing.models import utcnow  # noqa: E402
from services.order_processing.pricing import PriceCalculator  # noqa: E402
from services.order_processing.processors import OrderProcessor  # noqa: E402
from services.order_processing.validation import OrderValidator  # noqa: E402

VALID_CARD = "4111 1111 1111 1111"
VALID_IBAN = "DE89370400440532013000"


class RecordingNotifier:
    channel = "recording"

    def __init__(self) -> None:
        self.sent: List[Dict[str, str]] = []

    def send(self, recipient: str, subject: str, body: str) -> None:
        self.sent.append({"recipient": recipient, "subject": subject, "body": body})

    @property
    def subjects(self) -> List[str]:
        return [message["subject"] for message in self.sent]


class FailingNotifier:
    channel = "failing"

    def send(self, recipient: str, subject: str, body: str) -> None:
        raise RuntimeError("mail server unreachable")


class FakeClock:
    def __init__(self) -> None:
        self.offset = timedelta()

    def __call__(self):
        return utcnow() + self.offset


def physical_payload(**overrides: Any) -> Dict[str, Any]:
    payload: Dict[str, Any] = {
        "kind": "physical",
        "customer": {"name": "Jane Doe", "email": "jane@example.com", "country_code": "PL"},
        "items": [
            {"sku": "KB-01", "name": "Mechanical keyboard", "quantity": 1, "unit_price": "120.00"},
            {"sku": "MS-02", "name": "Mouse", "quantity": 2, "unit_price": "25.00"},
        ],
        "shipping_address": {
            "full_name": "Jane Doe",
            "line1": "ul. Prosta 1",
            "city": "Warszawa",
            "postal_code": "00-001",
            "country_code": "PL",
        },
        "payment": {"method": "credit_card", "details": {"card_number": VALID_CARD, "expiry": "12/99"}},
        "discount": {"type": "percentage", "percent": 10},
    }
    payload.update(overrides)
    return payload


def digital_payload(**overrides: Any) -> Dict[str, Any]:
    payload: Dict[str, Any] = {
        "kind": "digital",
        "customer": {"name": "Sam Reader", "email": "sam@example.com"},
        "items": [{"sku": "EBOOK-7", "name": "SOLID in practice", "quantity": 1, "unit_price": "19.99"}],
        "payment": {"method": "paypal", "details": {"payer_email": "sam@example.com"}},
    }
    payload.update(overrides)
    return payload


def as_order_create(payload: Dict[str, Any]) -> OrderCreate:
    return OrderCreate.model_validate(payload)


def make_processor(
    repository: Optional[InMemoryOrderRepository] = None,
    notifier: Any = None,
    clock: Any = None,
    payment_factory: Any = create_payment_strategy,
) -> OrderProcessor:
    return OrderProcessor(
        repository=repository or InMemoryOrderRepository(),
        notifier=notifier or RecordingNotifier(),
        calculator=PriceCalculator(
            tax_rate=Decimal("0.23"),
            shipping_fee=Decimal("15.00"),
            free_shipping_threshold=Decimal("200.00"),
        ),
        validator=OrderValidator(payment_factory),
        payment_factory=payment_factory,
        return_window_days=14,
        download_base_url="https://downloads.test",
        clock=clock or utcnow,
    )


@pytest.fixture
def repository() -> InMemoryOrderRepository:
    return InMemoryOrderRepository()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def processor(repository, notifier, clock) -> OrderProcessor:
    return make_processor(repository, notifier, clock)
