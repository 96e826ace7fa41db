import threading
from typing import Callable, Union

from .errors import RequestCancelledError


class CancellationToken:
    """Cooperative cancellation signal shared between a caller and its requests.

    The retry loop checks the token before every attempt and wakes up from a
    backoff sleep as soon as it fires. An attempt already on the wire is not
    interrupted, so a call may still succeed after cancel() was requested.
    """

    def __init__(self):
        self._event = threading.Event()
        self._lock = threading.Lock()
        self._callbacks: list[Callable[[], None]] = []

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        with self._lock:
            if self._event.is_set():
                return
            self._event.set()
            callbacks, self._callbacks = self._callbacks, []
        for cb in callbacks:
            cb()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise RequestCancelledError()

    def wait(self, timeout: Union[float, None] = None) -> bool:
        """Block up to timeout seconds; return True if the token fired."""
        return self._event.wait(timeout)

    def add_callback(self, fn: Callable[[], None]) -> Callable[[], None]:
        """Run fn once on cancel (immediately if already cancelled); return a remover."""
        with self._lock:
            if not self._event.is_set():
                self._callbacks.append(fn)

                def _remove():
                    with self._lock:
                        if fn in self._callbacks:
                            self._callbacks.remove(fn)

                return _remove
        fn()
        return lambda: None
