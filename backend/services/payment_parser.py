import re
from datetime import datetime
from typing import Optional

_CARD_LENGTHS = range(12, 20)


def _normalize_numeric(text: str) -> str:
    if not text:
        return ""
    trimmed = re.sub(r"^[^\d]+|[^\d]+$", "", text)
    return re.sub(r"[\s-]", "", trimmed)


def luhn_valid(digits: str) -> bool:
    if not digits.isdigit():
        return False
    total = 0
    for index, char in enumerate(reversed(digits)):
        value = int(char)
        if index % 2 == 1:
            value *= 2
            if value > 9:
                value -= 9
        total += value
    return total % 10 == 0


def extract_card_number(value: str) -> Optional[str]:
    digits = _normalize_numeric(value)
    if not digits.isdigit() or len(digits) not in _CARD_LENGTHS:
        return None
    return digits if luhn_valid(digits) else None


def mask_card_number(digits: str) -> str:
    return f"**** **** **** {digits[-4:]}"


def parse_expiry(value: str, now: Optional[datetime] = None) -> Optional[tuple[int, int]]:
    """Return (year, month) for an ``MM/YY`` expiry that has not lapsed yet."""
    match = re.fullmatch(r"\s*(\d{2})\s*/\s*(\d{2})\s*", value or "")
    if not match:
        return None
    month, year = int(match.group(1)), 2000 + int(match.group(2))
    if not 1 <= month <= 12:
        return None
    now = now or datetime.now()
    if (year, month) < (now.year, now.month):
        return None
    return year, month


def extract_iban(value: str) -> Optional[str]:
    compact = re.sub(r"\s", "", value or "").upper()
    if not re.fullmatch(r"[A-Z]{2}\d{2}[A-Z0-9]{11,30}", compact):
        return None
    rearranged = compact[4:] + compact[:4]
    numeric = "".join(str(int(ch, 36)) for ch in rearranged)
    return compact if int(numeric) % 97 == 1 else None


def mask_iban(iban: str) -> str:
    return f"{iban[:4]} **** {iban[-4:]}"


def is_valid_email(value: str) -> bool:
    return bool(re.fullmatch(r"[^@\s]+@[^@\s]+\.[A-Za-z]{2,}", value or ""))


def mask_email(email: str) -> str:
    local, _, domain = email.partition("@")
    return f"{local[:1]}***@{domain}"
