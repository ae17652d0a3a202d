"""
Port Discovery - candidate printer devices
pyudev on Linux, pyserial's port list everywhere else
"""

import logging
import sys
from dataclasses import dataclass
from typing import Iterable, List, Optional

from serial.tools import list_ports

logger = logging.getLogger(__name__)

# pyudev only works on Linux
try:
    import pyudev
    PYUDEV_AVAILABLE = True
except ImportError:
    PYUDEV_AVAILABLE = False


@dataclass(frozen=True)
class DeviceDescriptor:
    """A device the operator can print to"""
    name: str        # Bluetooth Serial Port, XP-58, ...
    device_id: str   # COM10, /dev/rfcomm0, /dev/usb/lp0
    source: str = ""

    @property
    def is_bluetooth(self) -> bool:
        return "bluetooth" in self.name.lower() or "rfcomm" in self.device_id.lower()

    def __str__(self) -> str:
        return f"{self.name} ({self.device_id})"


class PortDiscovery:
    """Lists printer candidates; platform backends override _scan"""

    source = "base"

    def list_devices(self) -> List[DeviceDescriptor]:
        devices = normalize_devices(self._scan())
        logger.info(f"Found {len(devices)} printer device(s) via {self.source}")
        return devices

    def _scan(self) -> Iterable[DeviceDescriptor]:
        raise NotImplementedError


class SerialPortDiscovery(PortDiscovery):
    """Serial ports from pyserial (COMx on Windows, /dev/tty* elsewhere)"""

    source = "pyserial"

    def _scan(self) -> Iterable[DeviceDescriptor]:
        for port in list_ports.comports():
            name = port.description if port.description and port.description != "n/a" else port.device
            logger.debug(f"Serial port: {port.device} - {name}")
            yield DeviceDescriptor(name=name, device_id=port.device, source=self.source)


class UdevPortDiscovery(PortDiscovery):
    """USB serial, RFCOMM and usblp device nodes from udev"""

    source = "udev"

    def __init__(self, context=None):
        if context is None and PYUDEV_AVAILABLE:
            context = pyudev.Context()
        self._context = context

    def _scan(self) -> Iterable[DeviceDescriptor]:
        if self._context is None:
            logger.warning("pyudev not available - udev discovery disabled")
            return

        for device in self._context.list_devices(subsystem='tty'):
            descriptor = self._tty_to_descriptor(device)
            if descriptor:
                yield descriptor

        for device in self._context.list_devices(subsystem='usblp'):
            descriptor = self._usblp_to_descriptor(device)
            if descriptor:
                yield descriptor

    def _tty_to_descriptor(self, device) -> Optional[DeviceDescriptor]:
        """Only USB-attached serial ports and Bluetooth RFCOMM links"""
        device_node = device.device_node
        if not device_node:
            return None

        if device.sys_name.startswith("rfcomm"):
            return DeviceDescriptor(
                name=f"Bluetooth Serial ({device.sys_name})",
                device_id=device_node,
                source=self.source
            )

        if device.get("ID_BUS") != "usb":
            return None

        vendor = device.get("ID_VENDOR", "")
        model = device.get("ID_MODEL", "")
        name = " ".join(part for part in (vendor, model) if part) or "USB Serial"
        return DeviceDescriptor(name=name.replace("_", " "), device_id=device_node, source=self.source)

    def _usblp_to_descriptor(self, device) -> Optional[DeviceDescriptor]:
        device_node = device.device_node
        if not device_node:
            return None

        # Vendor info lives on the USB parent
        parent = device.parent
        while parent is not None and not parent.get("ID_VENDOR_ID"):
            parent = parent.parent

        model = parent.get("ID_MODEL") if parent is not None else None
        name = f"USB Printer {model}".replace("_", " ") if model else "USB Printer"
        return DeviceDescriptor(name=name, device_id=device_node, source=self.source)


def normalize_devices(devices: Iterable[DeviceDescriptor]) -> List[DeviceDescriptor]:
    """Drop duplicate ids (first wins) and put Bluetooth devices first"""
    seen = set()
    unique = []
    for device in devices:
        if device.device_id in seen:
            continue
        seen.add(device.device_id)
        unique.append(device)
    return sorted(unique, key=lambda d: not d.is_bluetooth)


def default_discovery() -> PortDiscovery:
    """udev on Linux when available, pyserial otherwise"""
    if sys.platform.startswith("linux") and PYUDEV_AVAILABLE:
        return UdevPortDiscovery()
    return SerialPortDiscovery()
