import logging
from typing import Callable, Optional

import socketio
from socketio.exceptions import BadNamespaceError

from roomtimers.config import ClientConfig

logger = logging.getLogger(__name__)


def build_channel(config=ClientConfig) -> socketio.Client:
    """Socket.IO client with the library's own reconnect policy."""
    return socketio.Client(
        reconnection=True,
        reconnection_attempts=0,
        reconnection_delay=config.RECONNECT_DELAY_SEC,
        reconnection_delay_max=config.RECONNECT_DELAY_MAX_SEC,
        logger=False,
    )


class ConnectionSession:
    """One long-lived event channel to the authority.

    The channel is anything with the python-socketio ``Client`` surface used
    here (``on``, ``emit``, ``connect``, ``disconnect``, ``connected``), so
    tests can hand in a fake. Sends are fire-and-forget; while disconnected
    they are dropped, nothing is queued for replay.
    """

    def __init__(self, url: Optional[str] = None, channel=None, namespace: Optional[str] = None,
                 config=ClientConfig):
        self.url = url or config.AUTHORITY_URL
        self.namespace = namespace or config.SOCKETIO_NAMESPACE
        self.channel = channel if channel is not None else build_channel(config)
        self._connect_listeners = []
        self.channel.on('connect', self._on_connect, namespace=self.namespace)
        self.channel.on('disconnect', self._on_disconnect, namespace=self.namespace)
        self.channel.on('connect_error', self._on_connect_error, namespace=self.namespace)

    @property
    def connected(self) -> bool:
        return bool(getattr(self.channel, 'connected', False))

    def connect(self, wait_timeout: float = 5) -> None:
        """Connect, retrying with the reconnect policy until the authority answers.

        Raises socketio.exceptions.ConnectionError only once retrying is given up
        (for instance after close()).
        """
        logger.info(f"[session-connect] url={self.url} namespace={self.namespace}")
        self.channel.connect(self.url, namespaces=[self.namespace], wait_timeout=wait_timeout, retry=True)

    def close(self) -> None:
        # Also stops a reconnect loop that is still running
        self.channel.shutdown()
        logger.info(f"[session-close] url={self.url}")

    def wait(self) -> None:
        self.channel.wait()

    def send(self, event: str, payload) -> bool:
        try:
            self.channel.emit(event, payload, namespace=self.namespace)
        except BadNamespaceError:
            # Namespace not connected (yet, or any more)
            logger.debug(f"[send-drop] event={event} reason=disconnected")
            return False
        return True

    def on(self, event: str, handler: Callable) -> None:
        self.channel.on(event, handler, namespace=self.namespace)

    def on_connect(self, listener: Callable[[], None]) -> None:
        """Call `listener` after every (re)connect."""
        self._connect_listeners.append(listener)

    def _on_connect(self, *args):
        logger.info(f"[connected] url={self.url} sid={getattr(self.channel, 'sid', None)}")
        for listener in list(self._connect_listeners):
            listener()

    def _on_disconnect(self, *args):
        reason = args[0] if args else None
        logger.info(f"[disconnected] url={self.url} reason={reason}")

    def _on_connect_error(self, data=None):
        logger.warning(f"[connect-error] url={self.url} error={data}")
