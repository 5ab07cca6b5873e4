MESSAGES = {
    "en": {
        "order_received": {
            "subject": "Order {order_id} received",
            "body": "Hi {name}, we received your order {order_id}. Total to pay: {total}.",
        },
        "payment_confirmed": {
            "subject": "Payment for order {order_id} confirmed",
            "body": "Hi {name}, your {method} payment of {amount} for order {order_id} is confirmed ({reference}).",
        },
        "payment_failed": {
            "subject": "Payment for order {order_id} failed",
            "body": "Hi {name}, we could not take the payment for order {order_id}: {reason}. Please update your payment details.",
        },
        "order_shipped": {
            "subject": "Order {order_id} shipped",
            "body": "Hi {name}, order {order_id} is on its way to:\n{label}\nTracking number: {tracking_number}",
        },
        "order_delivered": {
            "subject": "Order {order_id} delivered",
            "body": "Hi {name}, order {order_id} has been delivered.",
        },
        "download_ready": {
            "subject": "Your download for order {order_id}",
            "body": "Hi {name}, your files for order {order_id} are ready: {download_url}",
        },
        "order_cancelled": {
            "subject": "Order {order_id} cancelled",
            "body": "Hi {name}, order {order_id} has been cancelled.",
        },
        "return_received": {
            "subject": "Return for order {order_id} registered",
            "body": "Hi {name}, we registered the return of order {order_id}. Reason: {reason}",
        },
        "refund_issued": {
            "subject": "Refund for order {order_id}",
            "body": "Hi {name}, we refunded {amount} for order {order_id} to {reference}.",
        },
    },
    "uk": {
        "order_received": {
            "subject": "Замовлення {order_id} отримано",
            "body": "Вітаємо, {name}! Ми отримали ваше замовлення {order_id}. До сплати: {total}.",
        },
        "payment_confirmed": {
            "subject": "Оплату замовлення {order_id} підтверджено",
            "body": "Вітаємо, {name}! Оплату {amount} ({method}) за замовлення {order_id} підтверджено ({reference}).",
        },
        "payment_failed": {
            "subject": "Оплата замовлення {order_id} не пройшла",
            "body": "Вітаємо, {name}! Не вдалося оплатити замовлення {order_id}: {reason}. Будь ласка, оновіть платіжні дані.",
        },
        "order_shipped": {
            "subject": "Замовлення {order_id} відправлено",
            "body": "Вітаємо, {name}! Замовлення {order_id} вже в дорозі за адресою:\n{label}\nНомер відстеження: {tracking_number}",
        },
        "order_delivered": {
            "subject": "Замовлення {order_id} доставлено",
            "body": "Вітаємо, {name}! Замовлення {order_id} доставлено.",
        },
        "download_ready": {
            "subject": "Завантаження для замовлення {order_id}",
            "body": "Вітаємо, {name}! Файли замовлення {order_id} готові: {download_url}",
        },
        "order_cancelled": {
            "subject": "Замовлення {order_id} скасовано",
            "body": "Вітаємо, {name}! Замовлення {order_id} скасовано.",
        },
        "return_received": {
            "subject": "Повернення замовлення {order_id} зареєстровано",
            "body": "Вітаємо, {name}! Ми зареєстрували повернення замовлення {order_id}. Причина: {reason}",
        },
        "refund_issued": {
            "subject": "Повернення коштів за замовлення {order_id}",
            "body": "Вітаємо, {name}! Ми повернули {amount} за замовлення {order_id} на {reference}.",
        },
    },
}
