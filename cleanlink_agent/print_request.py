"""
Print Request - web client payload
"""

import json
from dataclasses import dataclass, field
from typing import Any, List, Union

from .errors import InvalidRequestError


@dataclass
class BarcodeEntry:
    """One QR label: service, order, details and the QR payload"""
    service_name: str = ""
    order_id: str = ""
    body: str = ""
    qr_value: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> "BarcodeEntry":
        if not isinstance(data, dict):
            raise InvalidRequestError("qr_codes entries must be objects")
        return cls(
            service_name=_get_str(data, "service_name"),
            order_id=_get_str(data, "order_id"),
            body=_get_str(data, "body"),
            qr_value=_get_str(data, "qr_value"),
        )


@dataclass
class PrintRequest:
    title: str = ""
    order_id: str = ""
    body: str = ""
    legacy_qr_value: str = ""  # Deprecated single QR, "qr_value" on the wire
    mode: str = ""
    qr_codes: List[BarcodeEntry] = field(default_factory=list)
    token: str = ""

    @property
    def has_entries(self) -> bool:
        return len(self.qr_codes) > 0

    @property
    def has_legacy_value(self) -> bool:
        return self.legacy_qr_value != ""

    @classmethod
    def from_dict(cls, data: Any) -> "PrintRequest":
        """
        Build from the decoded JSON body.
        Missing fields are empty; "no_paper_cut" and unknown keys are ignored.
        """
        if not isinstance(data, dict):
            raise InvalidRequestError("Request body must be a JSON object")

        raw_codes = data.get("qr_codes")
        if raw_codes is None:
            raw_codes = []
        if not isinstance(raw_codes, list):
            raise InvalidRequestError("qr_codes must be a list")

        return cls(
            title=_get_str(data, "title"),
            order_id=_get_str(data, "order_id"),
            body=_get_str(data, "body"),
            legacy_qr_value=_get_str(data, "qr_value"),
            mode=_get_str(data, "print_mode"),
            qr_codes=[BarcodeEntry.from_dict(item) for item in raw_codes],
            token=_get_str(data, "token"),
        )

    @classmethod
    def from_json(cls, raw: Union[str, bytes], charset: str = "utf-8") -> "PrintRequest":
        """raw is the request body; bytes are decoded with the declared charset"""
        if isinstance(raw, bytes):
            try:
                raw = raw.decode(charset)
            except LookupError:
                raise InvalidRequestError(f"Unknown charset: {charset}")
            except UnicodeDecodeError as e:
                raise InvalidRequestError(f"Body is not valid {charset}: {e.reason}")
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise InvalidRequestError(f"Invalid JSON: {e}")
        return cls.from_dict(data)


def _get_str(data: dict, key: str) -> str:
    """String field, "" when missing or null"""
    value = data.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise InvalidRequestError(f"{key} must be a string")
    return value
