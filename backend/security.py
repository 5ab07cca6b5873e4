import logging

from cryptography.fernet import Fernet

from config import settings

logger = logging.getLogger("order-panel")


def _load_key() -> bytes:
    if settings.encryption_key:
        return settings.encryption_key.encode("utf-8")
    logger.warning(
        "ENCRYPTION_KEY is not set; payment details are encrypted with an ephemeral key and will not survive a restart."
    )
    return Fernet.generate_key()


_fernet = Fernet(_load_key())


def encrypt_secret(secret: str) -> str:
    return _fernet.encrypt(secret.encode("utf-8")).decode("utf-8")


def decrypt_secret(encrypted_value: str) -> str:
    return _fernet.decrypt(encrypted_value.encode("utf-8")).decode("utf-8")
