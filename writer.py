import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor

logger = logging.getLogger("flare.writer")


class StoreWriter:
    """Applies store mutations one at a time, in submission order.

    Delayed writes are submitted to the same executor once their timer fires,
    so they queue behind whatever mutation is in flight instead of racing it.
    """

    def __init__(self):
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="flare-writer")
        self._timers = set()
        self._lock = threading.Lock()
        self._closed = False

    def submit(self, fn, *args, **kwargs) -> Future:
        return self._executor.submit(fn, *args, **kwargs)

    def run(self, fn, *args, **kwargs):
        return self.submit(fn, *args, **kwargs).result()

    def schedule(self, delay: float, fn, *args, **kwargs) -> threading.Timer:
        timer = None

        def fire():
            with self._lock:
                self._timers.discard(timer)
                if self._closed:
                    return
                future = self.submit(fn, *args, **kwargs)
            future.add_done_callback(self._log_failure)

        timer = threading.Timer(delay, fire)
        timer.daemon = True
        with self._lock:
            if self._closed:
                raise RuntimeError("writer is shut down")
            self._timers.add(timer)
        timer.start()
        return timer

    def pending(self) -> int:
        with self._lock:
            return len(self._timers)

    def shutdown(self, wait: bool = True):
        with self._lock:
            self._closed = True
            timers = list(self._timers)
            self._timers.clear()
        for timer in timers:
            timer.cancel()
        self._executor.shutdown(wait=wait)

    @staticmethod
    def _log_failure(future: Future):
        exc = future.exception()
        if exc is not None:
            logger.error("scheduled write failed: %s", exc)
