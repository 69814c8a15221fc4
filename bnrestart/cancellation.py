import threading


class CancellationToken(object):
    def __init__(self):
        """
        Cooperative cancellation flag. The restart controller polls it before every run;
        a run that has already started is allowed to finish.
        """
        self._event = threading.Event()
        self._timer = None

    @property
    def cancelled(self):
        return self._event.is_set()

    def cancel(self):
        self._event.set()

    def wait(self, timeout=None):
        return self._event.wait(timeout)

    def cancel_after(self, seconds):
        """Cancel from a background timer once `seconds` have elapsed."""
        if self._timer is not None:
            self._timer.cancel()
        self._timer = threading.Timer(seconds, self.cancel)
        self._timer.daemon = True
        self._timer.start()
        return self
