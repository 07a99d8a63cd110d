"""
WebSocket session to the editor host
"""

import threading
from typing import Any, Callable, Optional

import websocket

from config import get_server_url
from core.connection_state import TransportEvent
from core.exceptions import NotConnectedError
from core.logging_config import get_logger

logger = get_logger(__name__)


class Session:
    """
    One WebSocket connection, run on its own reader thread.

    Lifecycle callbacks are forwarded as (session, TransportEvent, detail) to
    on_event; the owner decides whether the session is still current.
    """

    def __init__(self,
                 address: str,
                 generation: int,
                 on_event: Callable[["Session", TransportEvent, Any], None],
                 url: Optional[str] = None):
        """
        Args:
            address: Host the session connects to
            generation: Owner-assigned number identifying this session
            on_event: Receives open/close/error events
            url: Full URL override (defaults to ws://<address>:<port>)
        """
        self.address = address
        self.generation = generation
        self.url = url or get_server_url(address)
        self.closed = False
        self._on_event = on_event
        self._close_reported = False
        self._thread: Optional[threading.Thread] = None

        self.ws = websocket.WebSocketApp(
            self.url,
            on_open=self.on_open,
            on_message=self.on_message,
            on_error=self.on_error,
            on_close=self.on_close
        )

    def start(self):
        """Connect in the background"""
        self._thread = threading.Thread(
            target=self._run,
            daemon=True,
            name=f"RemoteSession-{self.generation}"
        )
        self._thread.start()

    def _run(self):
        if self.closed:
            return
        try:
            # Reconnects are scheduled by the owner, never by websocket-client
            self.ws.run_forever(reconnect=0)
        except Exception as e:
            logger.error("WebSocket run loop failed for %s: %s", self.url, e)
            self._on_event(self, TransportEvent.ERROR, e)
            if not self._close_reported:
                self._close_reported = True
                self._on_event(self, TransportEvent.CLOSE, (None, str(e)))

    def on_open(self, ws):
        if self.closed:
            # Closed while the handshake was in flight
            ws.close()
            return
        logger.info("WebSocket connected to %s", self.url)
        self._on_event(self, TransportEvent.OPEN, None)

    def on_message(self, ws, message):
        # The peer does not answer commands
        logger.debug("Ignoring message from %s: %r", self.url, message)

    def on_error(self, ws, error):
        logger.debug("WebSocket error on %s: %s", self.url, error)
        self._on_event(self, TransportEvent.ERROR, error)

    def on_close(self, ws, close_status_code, close_msg):
        if self._close_reported:
            return
        self._close_reported = True
        logger.debug("WebSocket closed (Code: %s, Message: %s)", close_status_code, close_msg)
        self._on_event(self, TransportEvent.CLOSE, (close_status_code, close_msg))

    def is_writable(self) -> bool:
        """True when the socket is open and can take a frame right now"""
        if self.closed:
            return False
        sock_ref = self.ws.sock
        return bool(sock_ref and getattr(sock_ref, 'connected', False))

    def send(self, text: str):
        """Send one text frame"""
        if not self.is_writable():
            raise NotConnectedError(details={"address": self.address})
        try:
            self.ws.send(text)
        except (websocket.WebSocketException, OSError) as e:
            raise NotConnectedError(details={"address": self.address, "error": str(e)}) from e

    def close(self):
        """Close without draining; later events from this session are stale"""
        self.closed = True
        try:
            self.ws.close()
        except (websocket.WebSocketException, OSError) as e:
            logger.debug("Error closing WebSocket %s: %s", self.url, e)

    def join(self, timeout: float = 1.0) -> bool:
        """Wait for the reader thread to exit"""
        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=timeout)
            return not self._thread.is_alive()
        return True
