import os
from dataclasses import dataclass, field
from decimal import Decimal
from pathlib import Path
from typing import List

from dotenv import load_dotenv

load_dotenv(Path(__file__).resolve().parent / ".env")


def _get_list(name: str, fallback: str = "") -> List[str]:
    raw_value = os.getenv(name, fallback)
    if not raw_value:
        return []
    return [item.strip() for item in raw_value.split(",") if item.strip()]


def _get_bool(name: str, fallback: bool = False) -> bool:
    raw_value = os.getenv(name)
    if raw_value is None or raw_value.strip() == "":
        return fallback
    return raw_value.strip().lower() in {"1", "true", "yes", "on"}


def _get_decimal(name: str, fallback: str) -> Decimal:
    return Decimal(os.getenv(name, fallback) or fallback)


@dataclass(frozen=True)
class Settings:
    order_store: str = os.getenv("ORDER_STORE", "memory").strip().lower()
    supabase_url: str | None = os.getenv("SUPABASE_URL")
    supabase_service_role_key: str | None = os.getenv("SUPABASE_SERVICE_ROLE_KEY")
    encryption_key: str | None = os.getenv("ENCRYPTION_KEY")
    notification_channel: str = os.getenv("NOTIFICATION_CHANNEL", "log").strip().lower()
    smtp_host: str = os.getenv("SMTP_HOST", "localhost")
    smtp_port: int = int(os.getenv("SMTP_PORT", "25"))
    smtp_sender: str = os.getenv("SMTP_SENDER", "orders@example.com")
    webhook_url: str | None = os.getenv("WEBHOOK_URL")
    tax_rate: Decimal = _get_decimal("TAX_RATE", "0.23")
    shipping_fee: Decimal = _get_decimal("SHIPPING_FEE", "15.00")
    free_shipping_threshold: Decimal = _get_decimal("FREE_SHIPPING_THRESHOLD", "200.00")
    return_window_days: int = int(os.getenv("RETURN_WINDOW_DAYS", "14"))
    download_base_url: str = os.getenv("DOWNLOAD_BASE_URL", "https://downloads.example.com")
    order_processing_interval_seconds: int = int(
        os.getenv("ORDER_PROCESSING_INTERVAL_SECONDS", "30")
    )
    auto_process_orders: bool = _get_bool("AUTO_PROCESS_ORDERS", False)
    log_level: str = os.getenv("LOG_LEVEL", "INFO").upper()
    allowed_origins: List[str] = field(
        default_factory=lambda: _get_list("ALLOWED_ORIGINS", "*")
    )


settings = Settings()
