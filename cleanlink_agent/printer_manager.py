"""
Printer Manager - send composed jobs to a device
"""

import logging
import os
import sys
import threading
from dataclasses import dataclass
from typing import Dict, List, Optional

from .errors import DeviceOpenError, DeviceWriteError, TransportError
from .port_discovery import DeviceDescriptor, PortDiscovery

logger = logging.getLogger(__name__)


@dataclass
class PrintResult:
    """Outcome of one write"""
    success: bool
    device_id: str = ""
    error: Optional[str] = None
    error_kind: Optional[str] = None  # open_failed, write_failed, empty_job
    bytes_written: int = 0


def device_path(device_id: str, platform: str = sys.platform) -> str:
    """COM10 → \\\\.\\COM10 on Windows, anything else is already a path"""
    if platform.startswith("win") and device_id.upper().startswith("COM"):
        return "\\\\.\\" + device_id
    return device_id


def _open_existing(path: str, flags: int) -> int:
    """Opener for device nodes: a missing node is an error, never a new file"""
    return os.open(path, flags & ~(os.O_CREAT | os.O_TRUNC))


class DeviceTransport:
    """
    Writes whole buffers to device handles.
    One lock per device id, so concurrent jobs never interleave on paper.
    """

    def __init__(self, platform: str = sys.platform):
        self.platform = platform
        self._locks: Dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    def _lock_for(self, device_id: str) -> threading.Lock:
        with self._locks_guard:
            lock = self._locks.get(device_id)
            if lock is None:
                lock = threading.Lock()
                self._locks[device_id] = lock
            return lock

    def write(self, device_id: str, data: bytes) -> int:
        """
        Open, write everything in one call, close.

        Raises:
            DeviceOpenError: device missing or not accessible
            DeviceWriteError: I/O error during the transfer
        """
        path = device_path(device_id, self.platform)
        with self._lock_for(device_id):
            try:
                handle = open(path, 'wb', opener=_open_existing)
            except OSError as e:
                raise DeviceOpenError(device_id, e.strerror or str(e)) from e

            try:
                with handle:
                    bytes_written = handle.write(data)
                    handle.flush()
            except OSError as e:
                raise DeviceWriteError(device_id, e.strerror or str(e)) from e

        return bytes_written

    def check(self, device_id: str) -> None:
        """Open and close the device without writing"""
        path = device_path(device_id, self.platform)
        with self._lock_for(device_id):
            try:
                with open(path, 'wb', opener=_open_existing):
                    pass
            except OSError as e:
                raise DeviceOpenError(device_id, e.strerror or str(e)) from e


class PrinterManager:
    """Discovered printers plus reporting writes as PrintResult"""

    def __init__(self, discovery: PortDiscovery, transport: Optional[DeviceTransport] = None):
        self._discovery = discovery
        self._transport = transport or DeviceTransport()
        self._printers: List[DeviceDescriptor] = []

    def refresh(self) -> List[DeviceDescriptor]:
        """Scan again"""
        self._printers = self._discovery.list_devices()
        for printer in self._printers:
            logger.info(f"Printer available: {printer}")
        return self.get_printers()

    def get_printers(self) -> List[DeviceDescriptor]:
        return list(self._printers)

    def has_printer(self) -> bool:
        return len(self._printers) > 0

    def find(self, device_id: str) -> Optional[DeviceDescriptor]:
        return next((p for p in self._printers if p.device_id == device_id), None)

    def print_data(self, data: bytes, device_id: str) -> PrintResult:
        """
        Send bytes to the printer, exactly once.

        Args:
            data: ESC/POS byte sequence
            device_id: target device (COM port or device node)

        Returns:
            PrintResult
        """
        try:
            bytes_written = self._transport.write(device_id, data)
        except TransportError as e:
            logger.error(e.message)
            return PrintResult(
                success=False,
                device_id=device_id,
                error=e.message,
                error_kind=e.error_code
            )

        logger.info(f"Printed {bytes_written} bytes to {device_id}")
        return PrintResult(success=True, device_id=device_id, bytes_written=bytes_written)

    def check_printer(self, device_id: str) -> PrintResult:
        """Is the device there and writable?"""
        try:
            self._transport.check(device_id)
        except TransportError as e:
            logger.warning(e.message)
            return PrintResult(
                success=False,
                device_id=device_id,
                error=e.message,
                error_kind=e.error_code
            )
        return PrintResult(success=True, device_id=device_id)
