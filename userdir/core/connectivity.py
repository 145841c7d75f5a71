"""Network connectivity signal with change notification"""

import threading
from typing import Callable, List, Optional

import requests

from ..utils.logger import get_logger

logger = get_logger(__name__)

ConnectivityCallback = Callable[[bool], None]


class ConnectivityMonitor:
    """
    Boolean "online" signal.

    Subscribers only hear about changes: setting the same value twice
    notifies once. The signal can be fed explicitly via set_connected()
    or by the background probe started with start().
    """

    def __init__(
        self,
        probe_url: Optional[str] = None,
        poll_interval_seconds: int = 10,
        probe_timeout: int = 5,
        connected: bool = False,
    ):
        self.probe_url = probe_url
        self.poll_interval_seconds = poll_interval_seconds
        self.probe_timeout = probe_timeout
        self._connected = connected
        self._callbacks: List[ConnectivityCallback] = []
        self._lock = threading.Lock()
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def connected(self) -> bool:
        return self._connected

    def subscribe(self, callback: ConnectivityCallback, replay: bool = True) -> Callable[[], None]:
        """
        Register for connectivity changes.

        With replay=True the callback immediately receives the current value.
        Returns a function that unsubscribes.
        """
        with self._lock:
            self._callbacks.append(callback)
        if replay:
            self._deliver(callback, self._connected)

        def unsubscribe() -> None:
            with self._lock:
                if callback in self._callbacks:
                    self._callbacks.remove(callback)

        return unsubscribe

    def set_connected(self, connected: bool) -> bool:
        """Update the signal. Returns True if the value changed."""
        with self._lock:
            if connected == self._connected:
                return False
            self._connected = connected
            callbacks = list(self._callbacks)

        logger.info("Connectivity changed", connected=connected)
        for callback in callbacks:
            self._deliver(callback, connected)
        return True

    @staticmethod
    def _deliver(callback: ConnectivityCallback, connected: bool) -> None:
        try:
            callback(connected)
        except Exception as e:
            logger.error("Connectivity callback failed", connected=connected, error=str(e), exc_info=True)

    def probe(self) -> bool:
        """HEAD the probe URL; any HTTP answer counts as online"""
        if not self.probe_url:
            return self._connected
        try:
            requests.head(self.probe_url, timeout=self.probe_timeout, allow_redirects=True)
            return True
        except requests.exceptions.RequestException as e:
            logger.debug("Connectivity probe failed", url=self.probe_url, error=str(e))
            return False

    def check_now(self) -> bool:
        """Probe once and feed the result into the signal"""
        connected = self.probe()
        self.set_connected(connected)
        return connected

    def _poll_loop(self) -> None:
        logger.info("Connectivity polling started", interval_seconds=self.poll_interval_seconds)
        while not self._stop.is_set():
            self.check_now()
            self._stop.wait(self.poll_interval_seconds)
        logger.info("Connectivity polling stopped")

    def start(self) -> None:
        """Start background probing. Idempotent."""
        if self._thread is not None:
            return
        self._stop.clear()
        self._thread = threading.Thread(
            target=self._poll_loop,
            daemon=True,
            name="connectivity-monitor",
        )
        self._thread.start()

    def stop(self) -> None:
        self._stop.set()
        if self._thread is not None:
            # Don't wait too long - daemon thread will exit with main process
            self._thread.join(timeout=2)
            if self._thread.is_alive():
                logger.warning("Connectivity thread still alive after timeout, continuing shutdown")
            self._thread = None
