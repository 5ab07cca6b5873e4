"""
Order capabilities, one narrow contract per action.

Physical and digital orders only implement the capabilities they actually
support; callers check for a capability with ``require_capability`` instead
of calling an action that would fail at runtime.
"""

from datetime import datetime, timedelta
from typing import Iterable, Optional, Protocol, Type, TypeVar, Union, runtime_checkable
from uuid import uuid4

from .errors import InvalidOrderTransition, UnsupportedOrderAction
from .models import Order, OrderKind, OrderStatus, utcnow

CANCELLABLE_STATUSES = {OrderStatus.PENDING, OrderStatus.PAYMENT_FAILED, OrderStatus.PAID}
RETURNABLE_STATUSES = {OrderStatus.SHIPPED, OrderStatus.DELIVERED}


@runtime_checkable
class Cancellable(Protocol):
    def cancel(self, order: Order) -> Order:
        ...


@runtime_checkable
class Shippable(Protocol):
    def ship(self, order: Order, tracking_number: str) -> Order:
        ...


@runtime_checkable
class Deliverable(Protocol):
    def mark_delivered(self, order: Order) -> Order:
        ...


@runtime_checkable
class Returnable(Protocol):
    def request_return(self, order: Order, reason: str, now: Optional[datetime] = None) -> Order:
        ...


@runtime_checkable
class Downloadable(Protocol):
    def issue_download(self, order: Order, base_url: str) -> Order:
        ...


Capability = TypeVar("Capability")

ACTION_NAMES = {
    Cancellable: "cancel",
    Shippable: "ship",
    Deliverable: "deliver",
    Returnable: "return",
    Downloadable: "download",
}


def _require_status(order: Order, allowed: Iterable[OrderStatus], action: str) -> None:
    if order.status not in set(allowed):
        raise InvalidOrderTransition(order.order_id, order.status.value, action)


def _cancel(order: Order) -> Order:
    _require_status(order, CANCELLABLE_STATUSES, "cancel")
    order.status = OrderStatus.CANCELLED
    order.touch()
    return order


class PhysicalOrderActions:
    def __init__(self, return_window_days: int = 14) -> None:
        self.return_window = timedelta(days=return_window_days)

    def cancel(self, order: Order) -> Order:
        return _cancel(order)

    def ship(self, order: Order, tracking_number: str) -> Order:
        _require_status(order, {OrderStatus.PAID}, "ship")
        tracking = (tracking_number or "").strip()
        if not tracking:
            raise InvalidOrderTransition(order.order_id, order.status.value, "ship without a tracking number")
        order.tracking_number = tracking
        order.status = OrderStatus.SHIPPED
        order.shipped_at = utcnow()
        order.touch()
        return order

    def mark_delivered(self, order: Order) -> Order:
        _require_status(order, {OrderStatus.SHIPPED}, "deliver")
        order.status = OrderStatus.DELIVERED
        order.delivered_at = utcnow()
        order.touch()
        return order

    def request_return(self, order: Order, reason: str, now: Optional[datetime] = None) -> Order:
        _require_status(order, RETURNABLE_STATUSES, "return")
        now = now or utcnow()
        started = order.delivered_at or order.shipped_at
        if started is not None and now - started > self.return_window:
            raise InvalidOrderTransition(
                order.order_id,
                order.status.value,
                f"return after the {self.return_window.days}-day return window",
            )
        order.return_reason = (reason or "").strip() or None
        order.status = OrderStatus.RETURNED
        order.touch()
        return order


class DigitalOrderActions:
    def cancel(self, order: Order) -> Order:
        return _cancel(order)

    def issue_download(self, order: Order, base_url: str) -> Order:
        _require_status(order, {OrderStatus.PAID}, "download")
        order.download_url = f"{base_url.rstrip('/')}/{order.order_id}/{uuid4().hex}"
        order.status = OrderStatus.DELIVERED
        order.delivered_at = utcnow()
        order.touch()
        return order


OrderActions = Union[PhysicalOrderActions, DigitalOrderActions]


def actions_for(order: Order, *, return_window_days: int = 14) -> OrderActions:
    if order.kind is OrderKind.PHYSICAL:
        return PhysicalOrderActions(return_window_days=return_window_days)
    return DigitalOrderActions()


def require_capability(actions: object, capability: Type[Capability], order: Order) -> Capability:
    if not isinstance(actions, capability):
        raise UnsupportedOrderAction(order.order_id, order.kind.value, ACTION_NAMES.get(capability, capability.__name__))
    return actions
