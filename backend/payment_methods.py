from __future__ import annotations

from typing import Callable, Dict, List

from services.order_processing.errors import UnsupportedPaymentMethod
from services.order_processing.payments import (
    BankTransferPayment,
    CashOnDeliveryPayment,
    CreditCardPayment,
    PaymentStrategy,
    PayPalPayment,
    Refundable,
)

PaymentStrategyFactory = Callable[[], PaymentStrategy]

_PAYMENT_METHODS: Dict[str, PaymentStrategyFactory] = {
    CreditCardPayment.name: CreditCardPayment,
    PayPalPayment.name: PayPalPayment,
    BankTransferPayment.name: BankTransferPayment,
    CashOnDeliveryPayment.name: CashOnDeliveryPayment,
}


def supported_payment_methods() -> List[str]:
    return list(_PAYMENT_METHODS)


def register_payment_method(name: str, factory: PaymentStrategyFactory) -> None:
    _PAYMENT_METHODS[name] = factory


def unregister_payment_method(name: str) -> None:
    _PAYMENT_METHODS.pop(name, None)


def is_supported(name: str) -> bool:
    return name in _PAYMENT_METHODS


def create_payment_strategy(name: str) -> PaymentStrategy:
    factory = _PAYMENT_METHODS.get(name)
    if factory is None:
        raise UnsupportedPaymentMethod(name)
    return factory()


def describe_payment_methods() -> List[Dict[str, object]]:
    described = []
    for name in _PAYMENT_METHODS:
        strategy = create_payment_strategy(name)
        described.append(
            {
                "name": name,
                "physical_only": bool(getattr(strategy, "physical_only", False)),
                "refundable": isinstance(strategy, Refundable),
            }
        )
    return described
