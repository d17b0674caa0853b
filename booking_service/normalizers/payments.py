"""Normalization of payment method names sent by the booking frontends."""

from enum import Enum

import structlog

logger = structlog.get_logger(__name__)


class PaymentMethod(str, Enum):
    CARD = "card"
    WALLET = "wallet"
    CASH = "cash"
    EXTERNAL_PROCESSOR = "external_processor"


# Checkout sends provider names; cash vouchers (oxxo) settle as cash.
METHOD_ALIASES: dict[str, PaymentMethod] = {
    "card": PaymentMethod.CARD,
    "tarjeta": PaymentMethod.CARD,
    "paypal": PaymentMethod.WALLET,
    "wallet": PaymentMethod.WALLET,
    "oxxo": PaymentMethod.CASH,
    "cash": PaymentMethod.CASH,
    "efectivo": PaymentMethod.CASH,
    "mercadopago": PaymentMethod.EXTERNAL_PROCESSOR,
    "external_processor": PaymentMethod.EXTERNAL_PROCESSOR,
}


def normalize_payment_method(raw: str | None) -> PaymentMethod:
    """
    Map a frontend payment method name onto the stored enumeration.

    Unknown or missing names fall back to card, matching what checkout
    has always recorded for them.

    Args:
        raw: Method name as sent by the client (case-insensitive)

    Returns:
        PaymentMethod: Normalized method
    """
    if raw:
        method = METHOD_ALIASES.get(raw.strip().lower())
        if method is not None:
            return method

    logger.warning("payment_method_defaulted", raw_method=raw, method=PaymentMethod.CARD.value)
    return PaymentMethod.CARD
