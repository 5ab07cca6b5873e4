import argparse
import code
from typing import Any, Dict, List

from dotenv import load_dotenv

from config import settings
from schemas import OrderCreate
from services.order_processing.errors import OrderProcessingError
from services.order_processing.processors import OrderProcessor
from services.order_processing_service import build_order_processor

CARD_ORDER: Dict[str, Any] = {
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
    "payment": {"method": "credit_card", "details": {"card_number": "4111 1111 1111 1111", "expiry": "12/99"}},
    "discount": {"type": "percentage", "percent": 10},
}

DIGITAL_ORDER: Dict[str, Any] = {
    "kind": "digital",
    "customer": {"name": "Олена Коваленко", "email": "olena@example.com", "country_code": "UA"},
    "items": [{"sku": "EBOOK-7", "name": "SOLID in practice", "quantity": 1, "unit_price": "19.99"}],
    "payment": {"method": "paypal", "details": {"payer_email": "olena@example.com"}},
}


def run_demo(processor: OrderProcessor) -> List[str]:
    """Walk a physical and a digital order through their lifecycles."""
    steps: List[str] = []

    order = processor.place_order(OrderCreate.model_validate(CARD_ORDER))
    steps.append(f"placed {order.order_id} total={order.pricing.total}")
    order = processor.process_order(order.order_id)
    steps.append(f"paid via {order.receipt.reference}")
    order = processor.ship_order(order.order_id, "TRACK-001")
    steps.append(f"shipped {order.tracking_number}")
    order = processor.request_return(order.order_id, "wrong layout")
    steps.append(f"returned: {order.return_reason}")
    order = processor.refund_order(order.order_id)
    steps.append(f"status={order.status.value}")

    digital = processor.place_order(OrderCreate.model_validate(DIGITAL_ORDER))
    processor.process_order(digital.order_id)
    digital = processor.issue_download(digital.order_id)
    steps.append(f"download {digital.download_url}")
    try:
        processor.request_return(digital.order_id, "changed my mind")
    except OrderProcessingError as exc:
        steps.append(f"refused: {exc}")

    cod_digital = dict(DIGITAL_ORDER, payment={"method": "cash_on_delivery", "details": {}})
    try:
        processor.place_order(OrderCreate.model_validate(cod_digital))
    except OrderProcessingError as exc:
        steps.append(f"rejected: {exc}")
    return steps


def main() -> None:
    load_dotenv()
    parser = argparse.ArgumentParser(description="Order processing shell")
    parser.add_argument("--demo", action="store_true", help="run the scripted walkthrough and exit")
    args = parser.parse_args()

    processor = build_order_processor(settings)
    if args.demo:
        for step in run_demo(processor):
            print(step)
        return

    banner = (
        "Order processing shell\n"
        "Variables 'processor' and 'OrderCreate' are available. Example:\n"
        ">>> processor.list_orders()\n"
    )
    namespace = {"processor": processor, "OrderCreate": OrderCreate}
    code.interact(banner=banner, local=namespace)


if __name__ == "__main__":
    main()
