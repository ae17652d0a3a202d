"""
Print Mode - which blocks a request prints
"""

import logging
from enum import Enum

from .errors import UnknownModeError

logger = logging.getLogger(__name__)


class PrintMode(Enum):
    RECEIPT_ONLY = "receipt-only"
    QR_ONLY = "qr-only"
    ALL = "all"
    LABEL = "label"
    SEPARATOR = "separator"


# Wire token -> mode. "barcode-only" is an alias some clients send.
MODE_TOKENS = {
    "receipt-only": PrintMode.RECEIPT_ONLY,
    "qr-only": PrintMode.QR_ONLY,
    "barcode-only": PrintMode.QR_ONLY,
    "all": PrintMode.ALL,
    "label": PrintMode.LABEL,
    "separator": PrintMode.SEPARATOR,
}


def resolve_mode(
    token: str,
    has_entries: bool,
    has_legacy_value: bool,
    strict: bool = False
) -> PrintMode:
    """
    Resolve the request's print_mode token.

    An empty token prints everything when there is QR data and the receipt
    alone otherwise. An unknown token lands on ALL, the deployed agent's
    fallback branch, unless strict is set.

    Raises:
        UnknownModeError: unknown token with strict=True
    """
    token = token or ""

    mode = MODE_TOKENS.get(token)
    if mode is not None:
        return mode

    if not token:
        if has_entries or has_legacy_value:
            return PrintMode.ALL
        return PrintMode.RECEIPT_ONLY

    if strict:
        raise UnknownModeError(token)

    logger.warning(f"Unknown print mode '{token}', printing all")
    return PrintMode.ALL
