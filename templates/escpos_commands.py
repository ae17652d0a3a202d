"""
ESC/POS Command Constants
Thermal printer byte sequences used by the receipt composer
"""

# Control characters
ESC = b'\x1b'
GS = b'\x1d'
LF = b'\x0a'

# === Initialization ===
INIT = ESC + b'@'  # Reset printer

# === Text Formatting ===
BOLD_ON = ESC + b'E\x01'
BOLD_OFF = ESC + b'E\x00'

UNDERLINE_ON = ESC + b'-\x01'
UNDERLINE_OFF = ESC + b'-\x00'

# === Print Mode (ESC ! n) ===
# Double height and small font share the same mode byte, so "off" and
# "normal" are the same command.
DOUBLE_HEIGHT_ON = ESC + b'!\x10'
DOUBLE_HEIGHT_OFF = ESC + b'!\x00'

FONT_SMALL = ESC + b'!\x01'
FONT_NORMAL = ESC + b'!\x00'

# === Alignment ===
ALIGN_LEFT = ESC + b'a\x00'
ALIGN_CENTER = ESC + b'a\x01'

# === Cut ===
CUT_FULL = GS + b'V\x00'


# === Toggle Helpers ===

def bold(on: bool) -> bytes:
    return BOLD_ON if on else BOLD_OFF


def underline(on: bool) -> bytes:
    return UNDERLINE_ON if on else UNDERLINE_OFF


def double_height(on: bool) -> bytes:
    return DOUBLE_HEIGHT_ON if on else DOUBLE_HEIGHT_OFF


def font_size(normal: bool) -> bytes:
    """normal=False selects the small font"""
    return FONT_NORMAL if normal else FONT_SMALL


# === Text ===

def encode_text(text: str, encoding: str = "utf-8") -> bytes:
    """
    Encode printable text for the printer.
    Control codes inside the text pass through untouched; characters the
    codec cannot represent become '?'.
    """
    return text.encode(encoding, errors="replace")
