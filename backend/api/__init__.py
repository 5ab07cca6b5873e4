from .info import router as info_router
from .orders import router as orders_router
from .order_processing import router as order_processing_router

__all__ = [
    "info_router",
    "orders_router",
    "order_processing_router",
]
