from typing import List, Optional


class OrderProcessingError(Exception):
    """Base class for every error raised by the order processing layer."""


class OrderNotFound(OrderProcessingError, LookupError):
    def __init__(self, order_id: str) -> None:
        super().__init__(f"Order {order_id} not found")
        self.order_id = order_id


class OrderValidationError(OrderProcessingError, ValueError):
    def __init__(self, problems: List[str]) -> None:
        super().__init__("; ".join(problems))
        self.problems = list(problems)


class InvalidOrderTransition(OrderProcessingError):
    def __init__(self, order_id: str, status: str, action: str) -> None:
        super().__init__(f"Cannot {action} order {order_id} in status {status}")
        self.order_id = order_id
        self.status = status
        self.action = action


class UnsupportedOrderAction(OrderProcessingError):
    def __init__(self, order_id: str, kind: str, action: str) -> None:
        super().__init__(f"{kind.capitalize()} order {order_id} does not support {action}")
        self.order_id = order_id
        self.kind = kind
        self.action = action


class UnsupportedPaymentMethod(OrderProcessingError, ValueError):
    def __init__(self, method: str) -> None:
        super().__init__(f"Payment method {method} is not supported")
        self.method = method


class PaymentError(OrderProcessingError):
    pass


class PaymentDeclined(PaymentError):
    def __init__(self, method: str, reason: str, order_id: Optional[str] = None) -> None:
        super().__init__(f"{method} payment declined: {reason}")
        self.method = method
        self.reason = reason
        self.order_id = order_id


class UnsupportedPaymentOperation(PaymentError):
    def __init__(self, method: str, operation: str) -> None:
        super().__init__(f"Payment method {method} does not support {operation}")
        self.method = method
        self.operation = operation
