from types import SimpleNamespace
from typing import List, Optional

import pytest

from cleanlink_agent import port_discovery
from cleanlink_agent.port_discovery import (
    DeviceDescriptor,
    SerialPortDiscovery,
    UdevPortDiscovery,
    default_discovery,
    normalize_devices,
)


class FakeUdevDevice(dict):
    """Property mapping plus the attributes pyudev devices expose"""

    def __init__(self, sys_name: str, device_node: Optional[str], parent=None, **properties):
        super().__init__(properties)
        self.sys_name = sys_name
        self.device_node = device_node
        self.parent = parent


class FakeUdevContext:
    def __init__(self, tty: List[FakeUdevDevice], usblp: List[FakeUdevDevice]):
        self._devices = {"tty": tty, "usblp": usblp}

    def list_devices(self, subsystem: str):
        return list(self._devices.get(subsystem, []))


class TestNormalizeDevices:
    def test_dedupe_keeps_first(self) -> None:
        devices = normalize_devices([
            DeviceDescriptor(name="First", device_id="COM3"),
            DeviceDescriptor(name="Second", device_id="COM3"),
        ])
        assert [d.name for d in devices] == ["First"]

    def test_bluetooth_sorted_first_stable(self) -> None:
        devices = normalize_devices([
            DeviceDescriptor(name="USB A", device_id="COM1"),
            DeviceDescriptor(name="Standard Serial over Bluetooth link", device_id="COM10"),
            DeviceDescriptor(name="USB B", device_id="COM2"),
        ])
        assert [d.device_id for d in devices] == ["COM10", "COM1", "COM2"]

    def test_descriptor_str(self) -> None:
        assert str(DeviceDescriptor(name="XP-58", device_id="COM4")) == "XP-58 (COM4)"


class TestSerialPortDiscovery:
    def test_lists_comports(self, monkeypatch) -> None:
        ports = [
            SimpleNamespace(device="COM3", description="USB-SERIAL CH340 (COM3)"),
            SimpleNamespace(device="COM10", description="Standard Serial over Bluetooth link (COM10)"),
            SimpleNamespace(device="/dev/ttyS0", description="n/a"),
        ]
        monkeypatch.setattr(port_discovery.list_ports, "comports", lambda: ports)

        devices = SerialPortDiscovery().list_devices()

        assert [d.device_id for d in devices] == ["COM10", "COM3", "/dev/ttyS0"]
        assert devices[2].name == "/dev/ttyS0"
        assert all(d.source == "pyserial" for d in devices)

    def test_no_ports(self, monkeypatch) -> None:
        monkeypatch.setattr(port_discovery.list_ports, "comports", lambda: [])
        assert SerialPortDiscovery().list_devices() == []


class TestUdevPortDiscovery:
    def test_usb_rfcomm_and_usblp(self) -> None:
        usb_parent = FakeUdevDevice("1-1", None, ID_VENDOR_ID="0483", ID_MODEL="XP-58")
        context = FakeUdevContext(
            tty=[
                FakeUdevDevice("ttyS0", "/dev/ttyS0"),
                FakeUdevDevice("ttyUSB0", "/dev/ttyUSB0", ID_BUS="usb", ID_VENDOR="1a86", ID_MODEL="USB_Serial"),
                FakeUdevDevice("rfcomm0", "/dev/rfcomm0"),
            ],
            usblp=[
                FakeUdevDevice("lp0", "/dev/usb/lp0", parent=FakeUdevDevice("1-1:1.0", None, parent=usb_parent)),
                FakeUdevDevice("lp1", None),
            ],
        )

        devices = UdevPortDiscovery(context).list_devices()

        assert [d.device_id for d in devices] == ["/dev/rfcomm0", "/dev/ttyUSB0", "/dev/usb/lp0"]
        assert devices[0].name == "Bluetooth Serial (rfcomm0)"
        assert devices[1].name == "1a86 USB Serial"
        assert devices[2].name == "USB Printer XP-58"

    def test_usblp_without_vendor_parent(self) -> None:
        context = FakeUdevContext(tty=[], usblp=[FakeUdevDevice("lp0", "/dev/usb/lp0")])
        devices = UdevPortDiscovery(context).list_devices()
        assert devices == [DeviceDescriptor(name="USB Printer", device_id="/dev/usb/lp0", source="udev")]

    def test_without_pyudev(self, monkeypatch) -> None:
        monkeypatch.setattr(port_discovery, "PYUDEV_AVAILABLE", False)
        assert UdevPortDiscovery().list_devices() == []


class TestDefaultDiscovery:
    def test_non_linux_uses_pyserial(self, monkeypatch) -> None:
        monkeypatch.setattr(port_discovery.sys, "platform", "win32")
        assert isinstance(default_discovery(), SerialPortDiscovery)

    def test_linux_without_pyudev_uses_pyserial(self, monkeypatch) -> None:
        monkeypatch.setattr(port_discovery.sys, "platform", "linux")
        monkeypatch.setattr(port_discovery, "PYUDEV_AVAILABLE", False)
        assert isinstance(default_discovery(), SerialPortDiscovery)

    @pytest.mark.skipif(not port_discovery.PYUDEV_AVAILABLE, reason="pyudev not installed")
    def test_linux_with_pyudev(self, monkeypatch) -> None:
        monkeypatch.setattr(port_discovery.sys, "platform", "linux")
        assert isinstance(default_discovery(), UdevPortDiscovery)
