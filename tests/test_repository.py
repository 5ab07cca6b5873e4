from decimal import Decimal

import pytest

from conftest import as_order_create, digital_payload
from config import Settings
from repositories.order_repository import (
    InMemoryOrderRepository,
    SupabaseOrderRepository,
    create_order_repository,
)
from services.order_processing.models import Order, OrderStatus


class FakeQuery:
    def __init__(self, table, rows):
        self.table = table
        self.rows = rows
        self.calls = []

    def __getattr__(self, name):
        def _call(*args, **kwargs):
            self.calls.append((name, args, kwargs))
            return self

        return _call

    def execute(self):
        return type("Response", (), {"data": self.rows})()


class FakeSupabase:
    def __init__(self, rows=None):
        self.rows = rows or []
        self.queries = []

    def table(self, name):
        query = FakeQuery(name, self.rows)
        self.queries.append(query)
        return query


@pytest.fixture
def order(processor):
    return processor.place_order(as_order_create(digital_payload()))


def test_in_memory_returns_copies(order):
    repository = InMemoryOrderRepository()
    repository.save(order)

    loaded = repository.get(order.order_id)
    loaded.status = OrderStatus.CANCELLED

    assert repository.get(order.order_id).status is OrderStatus.PENDING
    assert repository.get("missing") is None


def test_record_keeps_money_and_enums(order):
    record = order.to_record()

    assert record["pricing"]["total"] == "24.59"
    assert record["kind"] == "digital"
    restored = Order.from_record(record)
    assert restored.pricing.total == Decimal("24.59")
    assert restored.created_at == order.created_at


def test_in_memory_log_is_per_order():
    repository = InMemoryOrderRepository()
    repository.log_action("a", "place_order")
    repository.log_action("b", "place_order", status="error")

    log = repository.fetch_log("b")
    assert len(log) == 1
    assert log[0]["status"] == "error"
    assert log[0]["request"] == {}


def test_supabase_repository_upserts_records(order):
    client = FakeSupabase()
    SupabaseOrderRepository(client).save(order)

    query = client.queries[0]
    assert query.table == "orders"
    name, args, _ = query.calls[0]
    assert name == "upsert"
    assert args[0]["order_id"] == order.order_id


def test_supabase_repository_filters_by_status(order):
    client = FakeSupabase(rows=[order.to_record()])
    orders = SupabaseOrderRepository(client).list(OrderStatus.PENDING)

    assert [item.order_id for item in orders] == [order.order_id]
    assert ("eq", ("status", "pending"), {}) in client.queries[0].calls


def test_create_order_repository():
    assert isinstance(create_order_repository(Settings(order_store="memory")), InMemoryOrderRepository)
    with pytest.raises(RuntimeError):
        create_order_repository(Settings(order_store="sqlite"))
