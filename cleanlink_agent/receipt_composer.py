"""
Receipt Composer
PrintRequest → ESC/POS bytes
"""

import logging
from typing import Callable, Dict, List

from templates.escpos_commands import (
    INIT, LF, ALIGN_LEFT, ALIGN_CENTER, CUT_FULL,
    bold, double_height, encode_text
)
from templates.qr_commands import QRProfile, DEFAULT_QR_PROFILE, qr_code

from .print_mode import PrintMode, resolve_mode
from .print_request import BarcodeEntry, PrintRequest

logger = logging.getLogger(__name__)

# 32 columns on 57mm paper
DOUBLE_RULE = "=" * 32
SINGLE_RULE = "-" * 32

THANK_YOU = "Terima kasih"
THANK_YOU_SUB = "Atas kepercayaan Anda"
STAFF_CAPTION = "--- Untuk Staff ---"
QR_CAPTION = "Scan untuk update status"
LABEL_CAPTION = "Scan Barcode"

BLANK_LINES = "\n\n"  # spacer between QR entries and feed before the cut


class ReceiptComposer:
    """Builds the full byte stream for one print request"""

    def __init__(
        self,
        qr_profile: QRProfile = DEFAULT_QR_PROFILE,
        encoding: str = "utf-8",
        strict_modes: bool = False
    ):
        self.qr_profile = qr_profile
        self.encoding = encoding
        self.strict_modes = strict_modes
        self._builders: Dict[PrintMode, Callable[[PrintRequest], bytes]] = {
            PrintMode.RECEIPT_ONLY: self._compose_receipt_only,
            PrintMode.QR_ONLY: self._compose_qr_only,
            PrintMode.ALL: self._compose_all,
            PrintMode.LABEL: self._compose_label,
            PrintMode.SEPARATOR: self._compose_separator,
        }

    def resolve(self, request: PrintRequest) -> PrintMode:
        return resolve_mode(
            request.mode,
            has_entries=request.has_entries,
            has_legacy_value=request.has_legacy_value,
            strict=self.strict_modes
        )

    def compose(self, request: PrintRequest) -> bytes:
        """
        Resolve the mode and build the stream.

        Returns:
            ESC/POS byte sequence, b"" when the mode has nothing to print

        Raises:
            UnknownModeError: only when strict_modes is set
        """
        return self.compose_mode(request, self.resolve(request))

    def compose_mode(self, request: PrintRequest, mode: PrintMode) -> bytes:
        result = self._builders[mode](request)
        logger.debug(f"Composed {len(result)} bytes in {mode.value} mode for order {request.order_id!r}")
        return result

    # === Modes ===

    def _compose_receipt_only(self, request: PrintRequest) -> bytes:
        output = bytearray(INIT)
        output.extend(self._render_receipt(request))
        output.extend(self._render_finish())
        return bytes(output)

    def _compose_qr_only(self, request: PrintRequest) -> bytes:
        entries = self._qr_entries(request)
        if not entries:
            return b""

        output = bytearray(INIT)
        output.extend(self._render_qr_entries(entries))
        output.extend(self._render_finish())
        return bytes(output)

    def _compose_all(self, request: PrintRequest) -> bytes:
        output = bytearray(INIT)
        output.extend(self._render_receipt(request))
        output.extend(self._render_staff_banner())
        output.extend(self._render_qr_entries(self._qr_entries(request)))
        output.extend(self._render_finish())
        return bytes(output)

    def _compose_label(self, request: PrintRequest) -> bytes:
        entries = self._qr_entries(request)
        if not entries:
            return b""

        output = bytearray(INIT)
        for index, entry in enumerate(entries):
            if index > 0:
                output.extend(self._text(BLANK_LINES))
            output.extend(self._render_label(request.title, entry))
        output.extend(self._render_finish())
        return bytes(output)

    def _compose_separator(self, request: PrintRequest) -> bytes:
        output = bytearray(INIT)
        output.extend(self._text(BLANK_LINES))
        output.extend(ALIGN_CENTER)
        output.extend(self._text(SINGLE_RULE + "\n"))
        output.extend(ALIGN_CENTER)
        output.extend(self._bold_line(STAFF_CAPTION))
        output.extend(ALIGN_CENTER)
        output.extend(self._text(SINGLE_RULE + "\n"))
        output.extend(self._render_finish())
        return bytes(output)

    # === Blocks ===

    def _qr_entries(self, request: PrintRequest) -> List[BarcodeEntry]:
        """qr_codes, or one entry from the top-level fields for legacy clients"""
        if request.has_entries:
            return list(request.qr_codes)
        if request.has_legacy_value:
            return [BarcodeEntry(
                service_name=request.title,
                order_id=request.order_id,
                body=request.body,
                qr_value=request.legacy_qr_value
            )]
        return []

    def _render_receipt(self, request: PrintRequest) -> bytes:
        """Customer receipt up to the thank-you lines"""
        output = bytearray()
        output.extend(LF)
        output.extend(self._render_heading(request.title, request.order_id))

        # Body
        output.extend(ALIGN_LEFT)
        output.extend(self._text(request.body))

        # Thank you
        output.extend(ALIGN_CENTER)
        output.extend(self._text("\n" + DOUBLE_RULE + "\n"))
        output.extend(self._bold_line(THANK_YOU))
        output.extend(self._text(THANK_YOU_SUB + "\n"))
        return bytes(output)

    def _render_heading(self, title: str, order_id: str) -> bytes:
        """Big title, rule, ORDER line, rule"""
        output = bytearray()
        output.extend(ALIGN_CENTER)
        output.extend(bold(True))
        output.extend(double_height(True))
        output.extend(self._text(title + "\n"))
        output.extend(double_height(False))
        output.extend(bold(False))

        output.extend(ALIGN_CENTER)
        output.extend(self._text(DOUBLE_RULE + "\n"))

        output.extend(ALIGN_CENTER)
        output.extend(self._bold_line(f"ORDER: {order_id}"))

        output.extend(ALIGN_CENTER)
        output.extend(self._text(SINGLE_RULE + "\n"))
        return bytes(output)

    def _render_staff_banner(self) -> bytes:
        output = bytearray()
        output.extend(self._text(BLANK_LINES))
        output.extend(ALIGN_CENTER)
        output.extend(self._text(SINGLE_RULE + "\n"))
        output.extend(ALIGN_CENTER)
        output.extend(self._bold_line(STAFF_CAPTION))
        output.extend(ALIGN_CENTER)
        output.extend(self._text(SINGLE_RULE + "\n"))
        output.extend(self._text(BLANK_LINES))
        return bytes(output)

    def _render_qr_entries(self, entries: List[BarcodeEntry]) -> bytes:
        output = bytearray()
        for index, entry in enumerate(entries):
            if index > 0:
                output.extend(self._text(BLANK_LINES))
            output.extend(self._render_qr_entry(entry))
        return bytes(output)

    def _render_qr_entry(self, entry: BarcodeEntry) -> bytes:
        """Staff QR ticket for one service"""
        output = bytearray()
        output.extend(self._render_heading(entry.service_name, entry.order_id))

        output.extend(ALIGN_LEFT)
        output.extend(self._text(entry.body))

        output.extend(ALIGN_CENTER)
        output.extend(self._text("\n" + SINGLE_RULE + "\n"))

        output.extend(LF)
        output.extend(ALIGN_CENTER)
        output.extend(qr_code(entry.qr_value, self.qr_profile, self.encoding))

        output.extend(self._text("\n\n"))
        output.extend(ALIGN_CENTER)
        output.extend(self._bold_line(QR_CAPTION))
        return bytes(output)

    def _render_label(self, title: str, entry: BarcodeEntry) -> bytes:
        """Compact label: branch title, details, QR"""
        output = bytearray()
        output.extend(ALIGN_CENTER)
        output.extend(bold(True))
        output.extend(double_height(True))
        output.extend(self._text(title + "\n"))
        output.extend(double_height(False))
        output.extend(bold(False))

        output.extend(ALIGN_CENTER)
        output.extend(self._text(SINGLE_RULE + "\n"))

        output.extend(ALIGN_LEFT)
        output.extend(self._text(entry.body))

        output.extend(ALIGN_CENTER)
        output.extend(self._text(SINGLE_RULE + "\n"))

        output.extend(LF)
        output.extend(ALIGN_CENTER)
        output.extend(self._text(LABEL_CAPTION + "\n"))

        # Alignment is still centered from the caption
        output.extend(LF)
        output.extend(qr_code(entry.qr_value, self.qr_profile, self.encoding))
        output.extend(LF)
        return bytes(output)

    def _render_finish(self) -> bytes:
        """Feed and the one cut of the job"""
        return self._text(BLANK_LINES) + CUT_FULL

    # === Helpers ===

    def _text(self, text: str) -> bytes:
        return encode_text(text, self.encoding)

    def _bold_line(self, text: str) -> bytes:
        return bold(True) + self._text(text + "\n") + bold(False)
