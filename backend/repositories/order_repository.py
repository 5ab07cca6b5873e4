import threading
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Protocol

from config import Settings
from services.order_processing.models import Order, OrderStatus
from supabase_client import get_supabase

ORDERS_TABLE = "orders"
ORDER_LOG_TABLE = "order_action_log"


def _log_record(
    order_id: str,
    action: str,
    *,
    request: Optional[Dict[str, Any]] = None,
    response: Optional[Dict[str, Any]] = None,
    status: Optional[str] = None,
) -> Dict[str, Any]:
    return {
        "order_id": order_id,
        "action": action,
        "request": request or {},
        "response": response or {},
        "status": status or "success",
        "created_at": datetime.now(timezone.utc).isoformat(),
    }


class OrderRepository(Protocol):
    def get(self, order_id: str) -> Optional[Order]:
        ...

    def save(self, order: Order) -> Order:
        ...

    def list(self, status: Optional[OrderStatus] = None) -> List[Order]:
        ...

    def log_action(
        self,
        order_id: str,
        action: str,
        *,
        request: Optional[Dict[str, Any]] = None,
        response: Optional[Dict[str, Any]] = None,
        status: Optional[str] = None,
    ) -> None:
        ...

    def fetch_log(self, order_id: str) -> List[Dict[str, Any]]:
        ...


class InMemoryOrderRepository:
    """Keeps order records in process memory; the default store for local runs and tests."""

    def __init__(self) -> None:
        self._orders: Dict[str, Dict[str, Any]] = {}
        self._log: List[Dict[str, Any]] = []
        self._lock = threading.Lock()

    def get(self, order_id: str) -> Optional[Order]:
        with self._lock:
            record = self._orders.get(order_id)
        return Order.from_record(record) if record else None

    def save(self, order: Order) -> Order:
        record = order.to_record()
        with self._lock:
            self._orders[order.order_id] = record
        return order

    def list(self, status: Optional[OrderStatus] = None) -> List[Order]:
        with self._lock:
            records = list(self._orders.values())
        orders = [Order.from_record(record) for record in records]
        if status is not None:
            orders = [order for order in orders if order.status is status]
        return sorted(orders, key=lambda order: order.created_at)

    def log_action(
        self,
        order_id: str,
        action: str,
        *,
        request: Optional[Dict[str, Any]] = None,
        response: Optional[Dict[str, Any]] = None,
        status: Optional[str] = None,
    ) -> None:
        record = _log_record(order_id, action, request=request, response=response, status=status)
        with self._lock:
            self._log.append(record)

    def fetch_log(self, order_id: str) -> List[Dict[str, Any]]:
        with self._lock:
            return [dict(entry) for entry in self._log if entry["order_id"] == order_id]


class SupabaseOrderRepository:
    def __init__(self, client) -> None:
        self._client = client

    def get(self, order_id: str) -> Optional[Order]:
        response = (
            self._client.table(ORDERS_TABLE)
            .select("*")
            .eq("order_id", order_id)
            .limit(1)
            .execute()
        )
        items = response.data or []
        return Order.from_record(items[0]) if items else None

    def save(self, order: Order) -> Order:
        self._client.table(ORDERS_TABLE).upsert(order.to_record()).execute()
        return order

    def list(self, status: Optional[OrderStatus] = None) -> List[Order]:
        query = self._client.table(ORDERS_TABLE).select("*")
        if status is not None:
            query = query.eq("status", status.value)
        response = query.order("created_at").execute()
        return [Order.from_record(row) for row in response.data or []]

    def log_action(
        self,
        order_id: str,
        action: str,
        *,
        request: Optional[Dict[str, Any]] = None,
        response: Optional[Dict[str, Any]] = None,
        status: Optional[str] = None,
    ) -> None:
        record = _log_record(order_id, action, request=request, response=response, status=status)
        self._client.table(ORDER_LOG_TABLE).insert(record).execute()

    def fetch_log(self, order_id: str) -> List[Dict[str, Any]]:
        response = (
            self._client.table(ORDER_LOG_TABLE)
            .select("*")
            .eq("order_id", order_id)
            .order("created_at")
            .execute()
        )
        return response.data or []


def create_order_repository(settings: Settings) -> OrderRepository:
    if settings.order_store == "memory":
        return InMemoryOrderRepository()
    if settings.order_store == "supabase":
        return SupabaseOrderRepository(get_supabase())
    raise RuntimeError(f"Unknown ORDER_STORE: {settings.order_store}")
