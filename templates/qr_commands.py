"""
QR Code Commands
GS ( k function group: model, module size, error correction, store, print
"""

from dataclasses import dataclass
from enum import Enum
from typing import Tuple

from .escpos_commands import GS, encode_text

# GS ( k
QR_PREFIX = GS + b'(k'

# cn=49 (0x31) selects the QR symbol family for every function below
SELECT_MODEL_2 = QR_PREFIX + b'\x04\x00\x31\x41\x32\x00'
PRINT_STORED = QR_PREFIX + b'\x03\x00\x31\x51\x30'
STORE_FUNCTION = b'\x31\x50\x30'

MIN_MODULE_SIZE = 1
MAX_MODULE_SIZE = 16


class ErrorCorrection(Enum):
    """QR error correction level and its firmware byte"""
    LOW = 0x30
    MEDIUM = 0x31
    QUARTILE = 0x32
    HIGH = 0x33

    @classmethod
    def from_letter(cls, letter: str) -> "ErrorCorrection":
        letters = {
            "L": cls.LOW,
            "M": cls.MEDIUM,
            "Q": cls.QUARTILE,
            "H": cls.HIGH,
        }
        if not isinstance(letter, str):
            raise ValueError(f"QR error correction must be L, M, Q or H, got {letter!r}")
        try:
            return letters[letter.strip().upper()]
        except KeyError:
            raise ValueError(f"QR error correction must be L, M, Q or H, got {letter!r}")


@dataclass(frozen=True)
class QRProfile:
    """Fixed per-deployment QR settings (7 fits 57mm paper)"""
    module_size: int = 7
    error_correction: ErrorCorrection = ErrorCorrection.MEDIUM

    def __post_init__(self):
        if not MIN_MODULE_SIZE <= self.module_size <= MAX_MODULE_SIZE:
            raise ValueError(
                f"QR module size must be between {MIN_MODULE_SIZE} and "
                f"{MAX_MODULE_SIZE}, got {self.module_size}"
            )


DEFAULT_QR_PROFILE = QRProfile()


def module_size_command(size: int) -> bytes:
    return QR_PREFIX + b'\x03\x00\x31\x43' + bytes([size])


def error_correction_command(level: ErrorCorrection) -> bytes:
    return QR_PREFIX + b'\x03\x00\x31\x45' + bytes([level.value])


def store_length(payload_length: int) -> Tuple[int, int]:
    """
    pL, pH for the store command: payload plus the three function bytes,
    low byte first. Lengths past 0xFFFF wrap, no ceiling is enforced here.
    """
    total = payload_length + 3
    return total & 0xFF, (total >> 8) & 0xFF


def store_data_command(data: bytes) -> bytes:
    p_l, p_h = store_length(len(data))
    return QR_PREFIX + bytes([p_l, p_h]) + STORE_FUNCTION + data


def qr_code(payload: str, profile: QRProfile = DEFAULT_QR_PROFILE, encoding: str = "utf-8") -> bytes:
    """
    Full QR block for one payload.
    The printer stores the payload and draws the symbol itself.
    """
    output = bytearray()
    output.extend(SELECT_MODEL_2)
    output.extend(module_size_command(profile.module_size))
    output.extend(error_correction_command(profile.error_correction))
    output.extend(store_data_command(encode_text(payload, encoding)))
    output.extend(PRINT_STORED)
    return bytes(output)
