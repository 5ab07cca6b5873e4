import asyncio
import contextlib
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from config import Settings, settings
from payment_methods import create_payment_strategy
from repositories.order_repository import create_order_repository
from services.order_processing.errors import OrderProcessingError
from services.order_processing.messaging import create_notifier
from services.order_processing.models import OrderStatus
from services.order_processing.pricing import PriceCalculator
from services.order_processing.processors import OrderProcessor
from services.order_processing.validation import OrderValidator

logger = logging.getLogger("order-panel")


def build_order_processor(config: Settings) -> OrderProcessor:
    return OrderProcessor(
        repository=create_order_repository(config),
        notifier=create_notifier(config),
        calculator=PriceCalculator(
            tax_rate=config.tax_rate,
            shipping_fee=config.shipping_fee,
            free_shipping_threshold=config.free_shipping_threshold,
        ),
        validator=OrderValidator(create_payment_strategy),
        payment_factory=create_payment_strategy,
        return_window_days=config.return_window_days,
        download_base_url=config.download_base_url,
    )


def process_pending_orders(processor: OrderProcessor) -> int:
    processed = 0
    for order in processor.list_orders(OrderStatus.PENDING):
        try:
            processor.process_order(order.order_id)
        except OrderProcessingError as exc:
            logger.warning("Pending order %s not processed: %s", order.order_id, exc)
            continue
        except Exception as exc:
            logger.exception("Pending order %s failed: %s", order.order_id, exc)
            processor.repository.log_action(
                order.order_id,
                "process_order",
                request={"payment_method": order.payment_method},
                response={"error": f"{type(exc).__name__}: {exc}"},
                status="error",
            )
            continue
        processed += 1
    return processed


class OrderProcessingWorker:
    def __init__(self, processor: OrderProcessor, interval_seconds: int) -> None:
        self.processor = processor
        self.interval_seconds = interval_seconds
        self._task: Optional[asyncio.Task] = None
        self._last_run_at: Optional[datetime] = None
        self._last_success_at: Optional[datetime] = None
        self._last_error: Optional[str] = None
        self._processed_total = 0

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        if self.is_running:
            return
        self._task = asyncio.create_task(self._run())

    async def stop(self) -> None:
        if not self._task:
            return
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None

    async def run_once(self) -> int:
        self._last_run_at = datetime.now(timezone.utc)
        try:
            processed = await asyncio.to_thread(process_pending_orders, self.processor)
        except Exception as exc:
            self._last_error = str(exc)
            logger.exception("Order processing cycle failed: %s", exc)
            return 0
        self._processed_total += processed
        self._last_success_at = datetime.now(timezone.utc)
        self._last_error = None
        return processed

    async def _run(self) -> None:
        while True:
            await self.run_once()
            await asyncio.sleep(self.interval_seconds)

    def get_status(self) -> Dict[str, Any]:
        return {
            "running": self.is_running,
            "interval_seconds": self.interval_seconds,
            "last_run_at": self._last_run_at,
            "last_success_at": self._last_success_at,
            "last_error": self._last_error,
            "processed_total": self._processed_total,
        }


order_processor = build_order_processor(settings)
order_processing_worker = OrderProcessingWorker(
    order_processor, settings.order_processing_interval_seconds
)


def get_order_processor() -> OrderProcessor:
    return order_processor


def get_order_processing_worker() -> OrderProcessingWorker:
    return order_processing_worker
