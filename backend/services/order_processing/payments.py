import logging
from datetime import datetime
from decimal import Decimal
from typing import Callable, Dict, Optional, Protocol, runtime_checkable
from uuid import uuid4

from services.payment_parser import (
    extract_card_number,
    extract_iban,
    is_valid_email,
    mask_card_number,
    mask_email,
    mask_iban,
    parse_expiry,
)
from .errors import PaymentDeclined, PaymentError
from .models import Order, PaymentReceipt, quantize_money

logger = logging.getLogger("order-panel")


@runtime_checkable
class PaymentStrategy(Protocol):
    name: str
    physical_only: bool

    def pay(self, order: Order, amount: Decimal, details: Dict[str, str]) -> PaymentReceipt:
        ...


@runtime_checkable
class Refundable(Protocol):
    def refund(self, receipt: PaymentReceipt, amount: Decimal) -> PaymentReceipt:
        ...


def _new_receipt(method: str, amount: Decimal, *, captured: bool, reference: str) -> PaymentReceipt:
    return PaymentReceipt(
        payment_id=uuid4().hex,
        method=method,
        amount=quantize_money(amount),
        captured=captured,
        reference=reference,
    )


def _apply_refund(receipt: PaymentReceipt, amount: Decimal) -> PaymentReceipt:
    amount = quantize_money(amount)
    if amount <= 0:
        raise PaymentError(f"Refund amount must be positive, got {amount}")
    if amount > receipt.refundable_amount:
        raise PaymentError(
            f"Refund of {amount} exceeds refundable amount {receipt.refundable_amount} "
            f"for payment {receipt.payment_id}"
        )
    receipt.refunded_amount = quantize_money(receipt.refunded_amount + amount)
    logger.info("refund payment=%s method=%s amount=%s", receipt.payment_id, receipt.method, amount)
    return receipt


class CreditCardPayment:
    name = "credit_card"
    physical_only = False

    def __init__(self, clock: Optional[Callable[[], datetime]] = None) -> None:
        self._clock = clock or datetime.now

    def pay(self, order: Order, amount: Decimal, details: Dict[str, str]) -> PaymentReceipt:
        card_number = extract_card_number(details.get("card_number", ""))
        if not card_number:
            raise PaymentDeclined(self.name, "invalid card number", order.order_id)
        if not parse_expiry(details.get("expiry", ""), now=self._clock()):
            raise PaymentDeclined(self.name, "card expired or expiry malformed", order.order_id)
        return _new_receipt(self.name, amount, captured=True, reference=mask_card_number(card_number))

    def refund(self, receipt: PaymentReceipt, amount: Decimal) -> PaymentReceipt:
        return _apply_refund(receipt, amount)


class PayPalPayment:
    name = "paypal"
    physical_only = False

    def pay(self, order: Order, amount: Decimal, details: Dict[str, str]) -> PaymentReceipt:
        payer = (details.get("payer_email") or "").strip()
        if not is_valid_email(payer):
            raise PaymentDeclined(self.name, "payer email missing or malformed", order.order_id)
        return _new_receipt(self.name, amount, captured=True, reference=mask_email(payer))

    def refund(self, receipt: PaymentReceipt, amount: Decimal) -> PaymentReceipt:
        return _apply_refund(receipt, amount)


class BankTransferPayment:
    name = "bank_transfer"
    physical_only = False

    def pay(self, order: Order, amount: Decimal, details: Dict[str, str]) -> PaymentReceipt:
        iban = extract_iban(details.get("iban", ""))
        if not iban:
            raise PaymentDeclined(self.name, "invalid IBAN", order.order_id)
        return _new_receipt(self.name, amount, captured=True, reference=mask_iban(iban))

    def refund(self, receipt: PaymentReceipt, amount: Decimal) -> PaymentReceipt:
        return _apply_refund(receipt, amount)


class CashOnDeliveryPayment:
    """Money is collected by the courier, so there is nothing to refund online."""

    name = "cash_on_delivery"
    physical_only = True

    def pay(self, order: Order, amount: Decimal, details: Dict[str, str]) -> PaymentReceipt:
        return _new_receipt(self.name, amount, captured=False, reference="collect on delivery")
