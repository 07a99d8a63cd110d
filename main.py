#!/usr/bin/env python3
"""
Main application - wires the connection core to the settings store and console
"""

import argparse
import signal
import sys
from typing import Callable, List, Optional

from config import CONNECTION_CONFIG, LOGGING_CONFIG
from core.command_channel import CommandChannel
from core.config_validator import validate_startup_config, ConfigValidationError
from core.connection_manager import ConnectionManager
from core.exceptions import AddressMissingError
from core.logging_config import setup_logging, get_logger
from core.session import Session
from events import EventBus, EventLoop, EventTypes
from storage import AddressStore
from ui import RemoteConsole


class RemoteControl:
    def __init__(self,
                 address_store: Optional[AddressStore] = None,
                 session_factory: Callable[..., Session] = Session,
                 loop: Optional[EventLoop] = None,
                 console_factory: Callable[..., RemoteConsole] = RemoteConsole):
        self.logger = get_logger(__name__)
        self.event_bus = EventBus()
        self.loop = loop or EventLoop(poll_interval=CONNECTION_CONFIG["poll_interval"])
        self.address_store = address_store or AddressStore()

        self.connection_manager = ConnectionManager(
            loop=self.loop,
            event_bus=self.event_bus,
            session_factory=session_factory,
        )
        self.command_channel = CommandChannel(self.connection_manager)
        self.console = console_factory(
            connection_manager=self.connection_manager,
            command_channel=self.command_channel,
            address_store=self.address_store,
        )

        self.running = False

    def start(self, address: Optional[str] = None):
        """Start the event loop and connect to the saved (or given) address"""
        if address is not None:
            self.address_store.set_address(address)

        self.loop.start()

        stored = self.address_store.get_address()
        if stored:
            self.connection_manager.connect(stored)
        else:
            self.logger.info("No saved IP address; waiting for settings")

        self.running = True
        self.event_bus.emit(EventTypes.SYSTEM_START, {"address": stored}, source="main")

    def run(self):
        self.console.run()

    def stop(self):
        """Stop retrying, close the socket and the event loop"""
        if not self.running:
            return
        self.running = False
        self.logger.info("Stopping remote control")

        try:
            self.connection_manager.shutdown()
        except Exception as e:
            self.logger.error(f"Error shutting down connection manager: {e}", exc_info=True)

        self.loop.shutdown()
        self.event_bus.emit(EventTypes.SYSTEM_STOP, {}, source="main")


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Send editor commands to VS Code over WebSocket")
    parser.add_argument("--address", help="Host address of the editor extension (saved for next time)")
    parser.add_argument("--log-level", help="Override LOG_LEVEL")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)

    try:
        validate_startup_config()
    except ConfigValidationError as e:
        print(f"❌ Configuration validation failed: {e}")
        return 1

    logging_config = dict(LOGGING_CONFIG)
    if args.log_level:
        logging_config["log_level"] = args.log_level
    setup_logging(logging_config)
    logger = get_logger(__name__)

    app = RemoteControl()

    def signal_handler(sig, frame):
        app.stop()
        sys.exit(0)

    signal.signal(signal.SIGTERM, signal_handler)

    try:
        app.start(address=args.address)
    except AddressMissingError as e:
        print(f"❌ {e}")
        return 1

    try:
        app.run()
    except KeyboardInterrupt:
        print("\nShutting down...")
    finally:
        app.stop()

    logger.debug("Remote control exited")
    return 0


if __name__ == "__main__":
    sys.exit(main())
