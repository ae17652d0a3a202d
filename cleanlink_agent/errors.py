"""
Agent exceptions
"""

from typing import Optional


class PrinterAgentError(Exception):
    """Base class for every error the agent raises"""
    def __init__(self, message: str, error_code: Optional[str] = None):
        self.message = message
        self.error_code = error_code
        super().__init__(message)


class InvalidRequestError(PrinterAgentError):
    """Print request body could not be decoded"""
    def __init__(self, message: str):
        super().__init__(message, error_code="invalid_request")


class UnknownModeError(PrinterAgentError):
    """print_mode token not recognized (strict mode only)"""
    def __init__(self, token: str):
        self.token = token
        super().__init__(f"Unknown print mode: {token}", error_code="unknown_mode")


class TransportError(PrinterAgentError):
    """Device could not be opened or written"""
    def __init__(self, message: str, device_id: str, error_code: str):
        self.device_id = device_id
        super().__init__(message, error_code=error_code)


class DeviceOpenError(TransportError):
    def __init__(self, device_id: str, reason: str):
        super().__init__(f"Cannot open {device_id}: {reason}", device_id, "open_failed")


class DeviceWriteError(TransportError):
    def __init__(self, device_id: str, reason: str):
        super().__init__(f"Write to {device_id} failed: {reason}", device_id, "write_failed")
