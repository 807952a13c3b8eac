import logging
import queue
import threading
from abc import ABC, abstractmethod
from typing import Optional, Tuple

logger = logging.getLogger(__name__)

COPY = "复制"
PASTE = "粘贴"


class Notifier(ABC):

    @abstractmethod
    def show(self, title: str, body: str) -> None:
        pass


class LogNotifier(Notifier):

    def show(self, title: str, body: str) -> None:
        logger.info(f"{title}: {body}")


class TrayNotifier(Notifier):
    """Shows notifications as balloons of a running pystray icon."""

    def __init__(self, icon) -> None:
        self.icon = icon

    def show(self, title: str, body: str) -> None:
        self.icon.notify(body, title)


class NotificationService:
    """Hands notifications to a background worker.

    ``send_copy`` and ``send_paste`` only enqueue; a failing notifier is
    logged by the worker and never reaches the caller.
    """

    def __init__(self, notifier: Optional[Notifier] = None, auto_start: bool = False) -> None:
        self.notifier = notifier or LogNotifier()
        self._queue: "queue.Queue[Optional[Tuple[str, str]]]" = queue.Queue()
        self._lock = threading.RLock()
        self._worker: Optional[threading.Thread] = None
        self._is_running = False

        if auto_start:
            self.start()

    def start(self) -> None:
        with self._lock:
            if self._is_running:
                return

            self._is_running = True
            self._worker = threading.Thread(
                target=self._run, name="notifications", daemon=True)
            self._worker.start()

    def stop(self) -> None:
        with self._lock:
            if not self._is_running:
                return

            self._is_running = False
            self._queue.put(None)

        if self._worker is not None:
            self._worker.join(timeout=1.0)
            self._worker = None

    def join(self) -> None:
        """Block until every queued notification has been handled."""
        self._queue.join()

    def send_copy(self, client: str, body: str) -> None:
        self.send(COPY, client, body)

    def send_paste(self, client: str, body: str) -> None:
        self.send(PASTE, client, body)

    def send(self, action: str, client: str, body: str) -> None:
        if not body:
            body = f"{action}内容为空"
        title = f"{action}自 {client}"
        self._queue.put((title, body))

    def _run(self) -> None:
        while True:
            item = self._queue.get()
            try:
                if item is None:
                    return
                title, body = item
                try:
                    self.notifier.show(title, body)
                except Exception as e:
                    logger.warning(f"Failed to send notification {body!r}: {e}")
            finally:
                self._queue.task_done()

    def __enter__(self) -> "NotificationService":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()
