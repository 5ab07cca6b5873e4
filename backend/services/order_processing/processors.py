import logging
import threading
from contextlib import contextmanager
from datetime import datetime
from decimal import Decimal
from typing import Any, Callable, Dict, Iterator, List, Optional
from uuid import uuid4

from repositories.order_repository import OrderRepository
from schemas import OrderCreate
from security import decrypt_secret, encrypt_secret
from .actions import (
    Cancellable,
    Deliverable,
    Downloadable,
    OrderActions,
    Returnable,
    Shippable,
    actions_for,
    require_capability,
)
from .constants import ENCRYPTED_SUFFIX, SENSITIVE_PAYMENT_FIELDS
from .errors import (
    InvalidOrderTransition,
    OrderNotFound,
    PaymentDeclined,
    UnsupportedPaymentOperation,
)
from .messaging import Notifier, format_shipping_label, notify_customer
from .models import (
    Address,
    Customer,
    Order,
    OrderItem,
    OrderStatus,
    quantize_money,
    utcnow,
)
from .payments import PaymentStrategy, Refundable
from .pricing import PriceCalculator, create_discount_policy
from .validation import OrderValidator

logger = logging.getLogger("order-panel")

PROCESSABLE_STATUSES = {OrderStatus.PENDING, OrderStatus.PAYMENT_FAILED}
REFUNDABLE_STATUSES = {OrderStatus.RETURNED, OrderStatus.CANCELLED}


def seal_payment_details(details: Dict[str, str]) -> Dict[str, str]:
    sealed: Dict[str, str] = {}
    for key, value in details.items():
        if key in SENSITIVE_PAYMENT_FIELDS and value:
            sealed[f"{key}{ENCRYPTED_SUFFIX}"] = encrypt_secret(str(value))
        else:
            sealed[key] = value
    return sealed


def open_payment_details(details: Dict[str, str]) -> Dict[str, str]:
    opened: Dict[str, str] = {}
    for key, value in details.items():
        if key.endswith(ENCRYPTED_SUFFIX):
            opened[key[: -len(ENCRYPTED_SUFFIX)]] = decrypt_secret(value)
        else:
            opened[key] = value
    return opened


class OrderProcessor:
    """
    Coordinates order placement, payment and fulfilment.

    Every collaborator is passed in: storage, notification channel, pricing,
    validation and the payment strategy lookup. The processor itself only
    sequences their calls, persists the order after each step and records an
    action log entry.
    """

    def __init__(
        self,
        repository: OrderRepository,
        notifier: Notifier,
        calculator: PriceCalculator,
        validator: OrderValidator,
        payment_factory: Callable[[str], PaymentStrategy],
        *,
        return_window_days: int = 14,
        download_base_url: str = "https://downloads.example.com",
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.repository = repository
        self.notifier = notifier
        self.calculator = calculator
        self.validator = validator
        self.payment_factory = payment_factory
        self.return_window_days = return_window_days
        self.download_base_url = download_base_url
        self._clock = clock
        self._locks: Dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    @contextmanager
    def _exclusive(self, order_id: str) -> Iterator[None]:
        # serialises read-modify-write cycles on one order within this process
        with self._locks_guard:
            lock = self._locks.setdefault(order_id, threading.Lock())
        with lock:
            yield

    def _load(self, order_id: str) -> Order:
        order = self.repository.get(order_id)
        if order is None:
            raise OrderNotFound(order_id)
        return order

    def _actions(self, order: Order) -> OrderActions:
        return actions_for(order, return_window_days=self.return_window_days)

    def _commit(self, order: Order, action: str, request: Optional[Dict[str, Any]] = None) -> Order:
        self.repository.save(order)
        self.repository.log_action(order.order_id, action, request=request, response={"status": order.status.value})
        logger.info("%s order=%s status=%s", action, order.order_id, order.status.value)
        return order

    def _notify(self, order: Order, key: str, **fields: Any) -> None:
        notify_customer(self.notifier, self.repository, order, key, **fields)

    def place_order(self, payload: OrderCreate) -> Order:
        self.validator.validate(payload)
        policy = create_discount_policy(payload.discount)
        items = [
            OrderItem(
                sku=item.sku,
                name=item.name or item.sku,
                quantity=item.quantity,
                unit_price=quantize_money(item.unit_price),
            )
            for item in payload.items
        ]
        address = payload.shipping_address
        order = Order(
            order_id=uuid4().hex,
            kind=payload.kind,
            customer=Customer(
                name=payload.customer.name,
                email=payload.customer.email,
                country_code=payload.customer.country_code,
            ),
            items=items,
            shipping_address=Address(**address.model_dump()) if address else None,
            payment_method=payload.payment.method,
            payment_details=seal_payment_details(payload.payment.details),
            discount=payload.discount,
            pricing=self.calculator.price(payload.kind, items, policy),
        )
        self._commit(
            order,
            "place_order",
            request={
                "kind": order.kind.value,
                "payment_method": order.payment_method,
                "total": str(order.pricing.total),
            },
        )
        self._notify(order, "order_received")
        return order

    def process_order(self, order_id: str) -> Order:
        with self._exclusive(order_id):
            order = self._load(order_id)
            if order.status not in PROCESSABLE_STATUSES:
                raise InvalidOrderTransition(order_id, order.status.value, "process")
            strategy = self.payment_factory(order.payment_method)
            details = open_payment_details(order.payment_details)
            try:
                receipt = strategy.pay(order, order.pricing.total, details)
            except PaymentDeclined as exc:
                exc.order_id = order_id
                order.status = OrderStatus.PAYMENT_FAILED
                order.touch()
                self.repository.save(order)
                self.repository.log_action(
                    order_id,
                    "process_order",
                    request={"payment_method": order.payment_method},
                    response={"error": str(exc)},
                    status="error",
                )
                logger.warning("payment declined order=%s method=%s reason=%s", order_id, exc.method, exc.reason)
                self._notify(order, "payment_failed", reason=exc.reason)
                raise
            order.receipt = receipt
            order.status = OrderStatus.PAID
            order.paid_at = self._clock()
            order.touch()
            self._commit(order, "process_order", request={"payment_id": receipt.payment_id, "captured": receipt.captured})
            self._notify(
                order,
                "payment_confirmed",
                method=receipt.method,
                amount=receipt.amount,
                reference=receipt.reference,
            )
            return order

    def cancel_order(self, order_id: str) -> Order:
        with self._exclusive(order_id):
            order = self._load(order_id)
            cancellable = require_capability(self._actions(order), Cancellable, order)
            strategy: Optional[PaymentStrategy] = None
            if order.receipt and order.receipt.refundable_amount > 0:
                strategy = self.payment_factory(order.payment_method)
                if not isinstance(strategy, Refundable):
                    raise UnsupportedPaymentOperation(order.payment_method, "refund")
            cancellable.cancel(order)
            self._commit(order, "cancel_order")
            self._notify(order, "order_cancelled")
            if strategy is not None:
                self._refund(order, strategy, order.receipt.refundable_amount)
            return order

    def ship_order(self, order_id: str, tracking_number: str) -> Order:
        with self._exclusive(order_id):
            order = self._load(order_id)
            require_capability(self._actions(order), Shippable, order).ship(order, tracking_number)
            self._commit(order, "ship_order", request={"tracking_number": order.tracking_number})
            self._notify(
                order,
                "order_shipped",
                label=format_shipping_label(order.shipping_address),
                tracking_number=order.tracking_number,
            )
            return order

    def mark_delivered(self, order_id: str) -> Order:
        with self._exclusive(order_id):
            order = self._load(order_id)
            require_capability(self._actions(order), Deliverable, order).mark_delivered(order)
            if order.receipt and not order.receipt.captured:
                # collected by the courier
                order.receipt.captured = True
            self._commit(order, "mark_delivered")
            self._notify(order, "order_delivered")
            return order

    def issue_download(self, order_id: str) -> Order:
        with self._exclusive(order_id):
            order = self._load(order_id)
            require_capability(self._actions(order), Downloadable, order).issue_download(order, self.download_base_url)
            self._commit(order, "issue_download")
            self._notify(order, "download_ready", download_url=order.download_url)
            return order

    def request_return(self, order_id: str, reason: str) -> Order:
        with self._exclusive(order_id):
            order = self._load(order_id)
            require_capability(self._actions(order), Returnable, order).request_return(order, reason, now=self._clock())
            self._commit(order, "request_return", request={"reason": order.return_reason})
            self._notify(order, "return_received", reason=order.return_reason or "-")
            return order

    def refund_order(self, order_id: str, amount: Optional[Decimal] = None) -> Order:
        with self._exclusive(order_id):
            order = self._load(order_id)
            if order.status not in REFUNDABLE_STATUSES:
                raise InvalidOrderTransition(order_id, order.status.value, "refund")
            strategy = self.payment_factory(order.payment_method)
            if not isinstance(strategy, Refundable):
                raise UnsupportedPaymentOperation(order.payment_method, "refund")
            if order.receipt is None or order.receipt.refundable_amount <= 0:
                raise InvalidOrderTransition(order_id, order.status.value, "refund without a captured payment")
            return self._refund(order, strategy, amount if amount is not None else order.receipt.refundable_amount)

    def _refund(self, order: Order, strategy: Refundable, amount: Decimal) -> Order:
        receipt = strategy.refund(order.receipt, amount)
        if receipt.refundable_amount <= 0:
            order.status = OrderStatus.REFUNDED
        order.touch()
        self._commit(order, "refund_order", request={"amount": str(quantize_money(amount))})
        self._notify(order, "refund_issued", amount=quantize_money(amount), reference=receipt.reference)
        return order

    def get_order(self, order_id: str) -> Order:
        return self._load(order_id)

    def list_orders(self, status: Optional[OrderStatus] = None) -> List[Order]:
        return self.repository.list(status)

    def order_log(self, order_id: str) -> List[Dict[str, Any]]:
        self._load(order_id)
        return self.repository.fetch_log(order_id)
