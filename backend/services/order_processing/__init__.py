"""
Order processing split by responsibility: validation, pricing, payments,
order actions, notifications and the processor that sequences them.
Application wiring lives in services.order_processing_service.
"""
