"""
Config Manager - JSON config read/write
The selected printer is saved here after the operator picks one
"""

import codecs
import json
from pathlib import Path
from typing import Optional
from dataclasses import dataclass

from templates.qr_commands import ErrorCorrection, QRProfile

DEFAULT_PORT = 3491
DEFAULT_TOKEN = "CLEANLINK_SECRET_123"


@dataclass
class ServerConfig:
    host: str = "0.0.0.0"
    port: int = DEFAULT_PORT
    api_token: str = DEFAULT_TOKEN  # empty disables the token check
    cors_origin: str = "*"


@dataclass
class PrinterConfig:
    device: Optional[str] = None
    encoding: str = "utf-8"
    qr_module_size: int = 7
    qr_error_correction: str = "M"

    @property
    def qr_profile(self) -> QRProfile:
        return QRProfile(
            module_size=self.qr_module_size,
            error_correction=ErrorCorrection.from_letter(self.qr_error_correction)
        )


@dataclass
class ModesConfig:
    strict: bool = False  # reject unknown print_mode tokens


class ConfigManager:
    """Config file handling"""

    def __init__(self, config_path: Optional[str] = None):
        if config_path is None:
            # Relative to the project root
            project_root = Path(__file__).parent.parent
            config_path = project_root / "config" / "config.json"

        self.config_path = Path(config_path)
        self._data: dict = {}
        self.load()

    def load(self) -> None:
        """Read the config file, writing defaults on first run"""
        if not self.config_path.exists():
            self._data = self._get_default_config()
            self.save()
            return

        with open(self.config_path, "r", encoding="utf-8") as f:
            self._data = json.load(f)
        self.validate()

    def save(self) -> None:
        self.config_path.parent.mkdir(parents=True, exist_ok=True)

        with open(self.config_path, "w", encoding="utf-8") as f:
            json.dump(self._data, f, indent=2, ensure_ascii=False)

    def validate(self) -> None:
        """
        Raises:
            ValueError: port out of range, unknown codec or bad QR settings
        """
        server = self.server
        if not (1 <= server.port <= 65535):
            raise ValueError("server.port must be between 1 and 65535")

        printer = self.printer
        try:
            codecs.lookup(printer.encoding)
        except LookupError:
            raise ValueError(f"printer.encoding is not a known codec: {printer.encoding}")

        # QRProfile and ErrorCorrection check their own ranges
        printer.qr_profile

    def _get_default_config(self) -> dict:
        return {
            "server": {
                "host": "0.0.0.0",
                "port": DEFAULT_PORT,
                "api_token": DEFAULT_TOKEN,
                "cors_origin": "*"
            },
            "printer": {
                "device": None,
                "encoding": "utf-8",
                "qr_module_size": 7,
                "qr_error_correction": "M"
            },
            "modes": {
                "strict": False
            }
        }

    # === Property Accessors ===

    @property
    def server(self) -> ServerConfig:
        server_data = self._data.get("server", {})
        return ServerConfig(
            host=server_data.get("host", "0.0.0.0"),
            port=int(server_data.get("port", DEFAULT_PORT)),
            api_token=server_data.get("api_token", DEFAULT_TOKEN) or "",
            cors_origin=server_data.get("cors_origin", "*")
        )

    @property
    def printer(self) -> PrinterConfig:
        printer_data = self._data.get("printer", {})
        return PrinterConfig(
            device=printer_data.get("device"),
            encoding=printer_data.get("encoding", "utf-8"),
            qr_module_size=int(printer_data.get("qr_module_size", 7)),
            qr_error_correction=printer_data.get("qr_error_correction", "M")
        )

    @property
    def modes(self) -> ModesConfig:
        modes_data = self._data.get("modes", {})
        return ModesConfig(strict=bool(modes_data.get("strict", False)))

    # === Device Selection ===

    def has_device(self) -> bool:
        return bool(self.printer.device)

    def save_device(self, device_id: str) -> None:
        """Remember the operator's printer choice"""
        self._data.setdefault("printer", {})["device"] = device_id
        self.save()
