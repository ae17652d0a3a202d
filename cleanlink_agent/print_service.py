"""
Print Service - compose a request and send it to one device
Shared by the HTTP server and the console front end
"""

import logging

from .print_request import PrintRequest
from .printer_manager import PrinterManager, PrintResult
from .receipt_composer import ReceiptComposer

logger = logging.getLogger(__name__)

TEST_PRINT_BODY = (
    "Nama       : Bu Kayam\n"
    "Alamat     : Villa Nusa Indah 2 blok 5. No. 29\n"
    "Telp       : 0812 934 823\n"
    "--------------------------------\n"
    "Nomor      : VLN2 000 000 01\n"
    "Layanan    : Cuci Setrika\n"
    "Berat      : 13 kg\n"
    "Hrg satuan : Rp. 8.000\n"
    "Sub Total  : Rp. 104.000\n"
    "\n"
    "Pembayaran : Cash\n"
    "Bayar      : Rp. 105.000\n"
    "Kembali    : Rp. 1.000\n"
    "--------------------------------\n"
)


class PrintService:
    """Request → bytes → device, one attempt"""

    def __init__(self, composer: ReceiptComposer, printer_manager: PrinterManager):
        self.composer = composer
        self.printer_manager = printer_manager

    def print(self, request: PrintRequest, device_id: str) -> PrintResult:
        """
        Compose and write.

        Raises:
            UnknownModeError: strict mode and an unknown print_mode
        """
        mode = self.composer.resolve(request)
        data = self.composer.compose_mode(request, mode)

        if not data:
            logger.warning(f"Nothing to print for order {request.order_id!r} in {mode.value} mode")
            return PrintResult(success=True, device_id=device_id, error_kind="empty_job")

        logger.info(f"Printing order {request.order_id!r} ({mode.value}, {len(data)} bytes) on {device_id}")
        result = self.printer_manager.print_data(data, device_id)

        if not result.success:
            logger.error(f"Print failed for order {request.order_id!r}: {result.error}")
        return result

    def test_print(self, device_id: str) -> PrintResult:
        """Sample receipt so the operator can check paper and alignment"""
        request = PrintRequest(
            title="Smart Laundry Test",
            order_id="TEST-001",
            body=TEST_PRINT_BODY,
            mode="receipt-only"
        )
        return self.print(request, device_id)
