from config import settings
from payment_methods import describe_payment_methods
from schemas import ApiInfoResponse, PaymentMethodInfo
from services.order_processing.pricing import supported_discount_types
from services.order_processing.processors import OrderProcessor



async def get_api_info(processor: OrderProcessor) -> ApiInfoResponse:
    return ApiInfoResponse(
        payment_methods=[PaymentMethodInfo(**item) for item in describe_payment_methods()],
        discount_types=supported_discount_types(),
        notification_channel=processor.notifier.channel,
        order_store=settings.order_store,
    )
