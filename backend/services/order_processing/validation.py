from typing import Callable, List, Optional

import pycountry

from schemas import OrderCreate
from services.payment_parser import is_valid_email
from .errors import OrderValidationError, UnsupportedPaymentMethod
from .models import OrderKind
from .payments import PaymentStrategy
from .pricing import create_discount_policy


def resolve_country(code: Optional[str]):
    normalized = (code or "").strip().upper()
    if not normalized:
        return None
    return pycountry.countries.get(alpha_2=normalized) or pycountry.countries.get(alpha_3=normalized)


class OrderValidator:
    def __init__(self, payment_factory: Callable[[str], PaymentStrategy]) -> None:
        self._payment_factory = payment_factory

    def problems(self, payload: OrderCreate) -> List[str]:
        problems: List[str] = []
        if not payload.items:
            problems.append("order must contain at least one item")
        for index, item in enumerate(payload.items):
            if item.quantity <= 0:
                problems.append(f"item {index} ({item.sku}): quantity must be positive")
            if item.unit_price < 0:
                problems.append(f"item {index} ({item.sku}): unit price must not be negative")

        if not is_valid_email(payload.customer.email):
            problems.append(f"customer email '{payload.customer.email}' is malformed")
        if payload.customer.country_code and resolve_country(payload.customer.country_code) is None:
            problems.append(f"customer country '{payload.customer.country_code}' is unknown")

        if payload.kind is OrderKind.PHYSICAL:
            address = payload.shipping_address
            if address is None:
                problems.append("physical orders require a shipping address")
            elif resolve_country(address.country_code) is None:
                problems.append(f"shipping country '{address.country_code}' is unknown")

        try:
            strategy = self._payment_factory(payload.payment.method)
        except UnsupportedPaymentMethod:
            problems.append(f"payment method '{payload.payment.method}' is not supported")
        else:
            if strategy.physical_only and payload.kind is not OrderKind.PHYSICAL:
                problems.append(f"payment method '{strategy.name}' is only available for physical orders")

        try:
            create_discount_policy(payload.discount)
        except OrderValidationError as exc:
            problems.extend(exc.problems)
        return problems

    def validate(self, payload: OrderCreate) -> None:
        problems = self.problems(payload)
        if problems:
            raise OrderValidationError(problems)
