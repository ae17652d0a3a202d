from typing import Iterable, List

import pytest

from cleanlink_agent.port_discovery import DeviceDescriptor, PortDiscovery
from cleanlink_agent.print_request import BarcodeEntry, PrintRequest
from cleanlink_agent.receipt_composer import ReceiptComposer


class StaticDiscovery(PortDiscovery):
    """Returns a fixed device list"""

    source = "static"

    def __init__(self, devices: List[DeviceDescriptor]):
        self.devices = devices

    def _scan(self) -> Iterable[DeviceDescriptor]:
        return list(self.devices)


@pytest.fixture
def composer() -> ReceiptComposer:
    return ReceiptComposer()


@pytest.fixture
def two_entries() -> List[BarcodeEntry]:
    return [
        BarcodeEntry(service_name="Service A", order_id="A-1", body="Shirt x2\n", qr_value="https://qr.example/A"),
        BarcodeEntry(service_name="Service B", order_id="B-2", body="Blanket x1\n", qr_value="https://qr.example/B"),
    ]


@pytest.fixture
def receipt_request() -> PrintRequest:
    return PrintRequest(title="Laundry Co", order_id="123", body="Thank you\n", mode="receipt-only")


@pytest.fixture
def device_file(tmp_path) -> str:
    """A regular file standing in for the printer device node"""
    path = tmp_path / "printer0"
    path.write_bytes(b"")
    return str(path)
