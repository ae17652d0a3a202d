#!/usr/bin/env python3
"""
Cleanlink Printer Agent
Console entry point
"""

import argparse
import asyncio
import logging
import signal
import sys
from pathlib import Path
from typing import List, Optional

from .config_manager import ConfigManager
from .http_server import create_app, start_server
from .port_discovery import DeviceDescriptor, default_discovery
from .print_service import PrintService
from .printer_manager import PrinterManager
from .receipt_composer import ReceiptComposer

logger = logging.getLogger(__name__)


def setup_logging(log_dir: Optional[Path] = None, level: int = logging.INFO) -> None:
    if log_dir is None:
        log_dir = Path(__file__).parent.parent / "logs"
    log_dir.mkdir(exist_ok=True)

    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler(sys.stdout),
            logging.FileHandler(log_dir / 'cleanlink-printer.log', mode='a')
        ]
    )


class PrinterAgentApp:
    """Pick a printer, then serve print jobs until stopped"""

    def __init__(self, args: argparse.Namespace):
        self.args = args
        self.config = ConfigManager(args.config)
        self.printer_manager = PrinterManager(default_discovery())

        printer_config = self.config.printer
        composer = ReceiptComposer(
            qr_profile=printer_config.qr_profile,
            encoding=printer_config.encoding,
            strict_modes=self.config.modes.strict
        )
        self.service = PrintService(composer, self.printer_manager)
        self._shutdown_event: Optional[asyncio.Event] = None

    async def run(self) -> None:
        self._shutdown_event = asyncio.Event()
        logger.info("=" * 40)
        logger.info("Cleanlink Printer Agent starting...")
        logger.info("=" * 40)

        device_id = self._select_device()
        if not device_id:
            logger.error("No printer selected. Exiting.")
            return

        if self.args.test_print or (not self.args.no_prompt and self._ask_yes_no("Would you like to test the printer? (y/n): ")):
            self._test_print(device_id)

        server_config = self.config.server
        host = self.args.host or server_config.host
        port = self.args.port or server_config.port

        app = create_app(self.service, server_config, device_id)
        runner = await start_server(app, host, port)
        logger.info(f"Printer: {device_id}")
        logger.info("Press Ctrl+C to stop the server")

        self._setup_signal_handlers()
        try:
            await self._shutdown_event.wait()
        finally:
            logger.info("Shutting down...")
            await runner.cleanup()
            logger.info("Shutdown complete")

    # === Device Selection ===

    def _select_device(self) -> Optional[str]:
        """--device, then the saved choice, then an interactive pick"""
        logger.info("Detecting printers...")
        printers = self.printer_manager.refresh()

        if self.args.device:
            self._warn_if_undetected(self.args.device)
            return self.args.device

        if self.config.has_device():
            saved = self.config.printer.device
            if self.args.no_prompt or self._ask_yes_no(f"Use saved printer {saved}? (y/n): "):
                self._warn_if_undetected(saved)
                return saved

        if self.args.no_prompt:
            return None

        if not printers:
            logger.error("No printers found! Please check if your printer is connected.")
            return None

        selected = self._prompt_for_printer(printers)
        if selected is None:
            return None

        self.config.save_device(selected.device_id)
        logger.info(f"Selected printer: {selected}")
        return selected.device_id

    def _warn_if_undetected(self, device_id: str) -> None:
        printer = self.printer_manager.find(device_id)
        if printer is None:
            logger.warning(f"{device_id} was not detected, using it anyway")
        else:
            logger.info(f"Using printer: {printer}")

    def _prompt_for_printer(self, printers: List[DeviceDescriptor]) -> Optional[DeviceDescriptor]:
        """None when stdin is closed"""
        print()
        print("Available Printers:")
        print("=" * 40)
        for index, printer in enumerate(printers, start=1):
            print(f"[{index}] {printer.name}")
            print(f"    Port: {printer.device_id}")
        print("=" * 40)

        while True:
            try:
                choice = input(f"Select printer number (1-{len(printers)}): ").strip()
            except EOFError:
                logger.error("No input available to select a printer (use --device or --no-prompt)")
                return None
            if choice.isdigit() and 1 <= int(choice) <= len(printers):
                return printers[int(choice) - 1]
            print("Invalid selection. Please try again.")

    def _ask_yes_no(self, prompt: str) -> bool:
        """Closed stdin counts as no"""
        try:
            answer = input(prompt).strip().lower()
        except EOFError:
            return False
        return answer in ("y", "yes")

    def _test_print(self, device_id: str) -> None:
        logger.info("Sending test print...")
        result = self.service.test_print(device_id)
        if result.success:
            logger.info("Test print completed successfully!")
        else:
            logger.error(f"Test print failed: {result.error}")

    # === Shutdown ===

    def _setup_signal_handlers(self) -> None:
        """SIGTERM and SIGINT set the shutdown event (not available on Windows)"""
        loop = asyncio.get_running_loop()

        for sig in (signal.SIGTERM, signal.SIGINT):
            try:
                loop.add_signal_handler(sig, self._shutdown_event.set)
            except NotImplementedError:
                # Windows: Ctrl+C arrives as KeyboardInterrupt in asyncio.run
                pass


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Cleanlink Printer Agent")
    parser.add_argument("--config", help="Path to config.json")
    parser.add_argument("--device", help="Printer device id (COM10, /dev/rfcomm0, ...)")
    parser.add_argument("--host", help="Listen address")
    parser.add_argument("--port", type=int, help="Listen port")
    parser.add_argument("--no-prompt", action="store_true", help="Never ask questions on stdin")
    parser.add_argument("--test-print", action="store_true", help="Print a test receipt before serving")
    parser.add_argument("--debug", action="store_true", help="Debug logging")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None):
    """Entry point"""
    args = parse_args(argv)
    setup_logging(level=logging.DEBUG if args.debug else logging.INFO)

    try:
        asyncio.run(PrinterAgentApp(args).run())
    except KeyboardInterrupt:
        logger.info("Keyboard interrupt received")


if __name__ == "__main__":
    main()
