"""
Send gate for editor command tokens
"""

from typing import Any, Dict, Optional

from core.connection_manager import ConnectionManager
from core.exceptions import AddressMissingError, InvalidCommandError, NotConnectedError
from core.logging_config import get_logger
from events.event_bus import EventBus, EventTypes

logger = get_logger(__name__)


class CommandChannel:
    """
    Forwards command tokens while the link is up.

    No queueing and no retry: a send while disconnected fails immediately and
    the token is dropped.
    """

    def __init__(self, connection_manager: ConnectionManager, event_bus: Optional[EventBus] = None):
        self.connection_manager = connection_manager
        self.event_bus = event_bus or connection_manager.event_bus

        self.sent_count = 0
        self.rejected_count = 0

    def send(self, token: str):
        """
        Transmit token as a single text frame

        Raises:
            InvalidCommandError: token is empty
            AddressMissingError: no address has been configured
            NotConnectedError: the link is not Connected or not writable
        """
        if not token or not token.strip():
            raise InvalidCommandError("Command token cannot be empty")

        if not self.connection_manager.address:
            self._reject(token, AddressMissingError())

        session = self.connection_manager.get_writable_session()
        if session is None:
            self._reject(token, NotConnectedError(details={
                "status": self.connection_manager.current_status().value,
            }))

        try:
            session.send(token)
        except NotConnectedError as e:
            self._reject(token, e)

        self.sent_count += 1
        logger.info("Sending command: %s", token)
        self.event_bus.emit(EventTypes.COMMAND_SENT, {
            "command": token,
            "address": session.address,
        }, source="command_channel")

    def _reject(self, token: str, error: NotConnectedError):
        self.rejected_count += 1
        logger.warning("Command %s rejected: %s", token, error)
        self.event_bus.emit(EventTypes.COMMAND_REJECTED, {
            "command": token,
            "reason": str(error),
            "error_type": type(error).__name__,
        }, source="command_channel")
        raise error

    def get_stats(self) -> Dict[str, Any]:
        return {
            "sent": self.sent_count,
            "rejected": self.rejected_count,
        }
