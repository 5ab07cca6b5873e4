# Payment detail fields encrypted before the order is stored
SENSITIVE_PAYMENT_FIELDS = [
    "card_number",
    "iban",
]

ENCRYPTED_SUFFIX = "_encrypted"

DEFAULT_LANGUAGE = "en"
UKRAINIAN_COUNTRY_CODES = {"UA", "UKR"}
