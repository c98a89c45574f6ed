"""Shared test helpers for PrecisionTimer."""


class SignalCollector:
    """Utility to capture pyqtSignal emissions into a list."""

    def __init__(self):
        self.items: list = []

    def slot(self, *args):
        self.items.append(args if len(args) > 1 else args[0] if args else None)

    def __call__(self, *args):
        self.slot(*args)

    def __len__(self):
        return len(self.items)

    def __getitem__(self, idx):
        return self.items[idx]

    @property
    def last(self):
        return self.items[-1] if self.items else None

    def clear(self):
        self.items.clear()


class FakeClock:
    """Manually advanced millisecond clock."""

    def __init__(self, now: int = 0):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> int:
        self.now += ms
        return self.now

    def set(self, now: int) -> int:
        self.now = now
        return self.now


class CallRecorder:
    """Callback stand-in that counts invocations and can be made to raise."""

    def __init__(self, error: Exception | None = None, side_effect=None):
        self.calls = 0
        self.error = error
        self.side_effect = side_effect

    def __call__(self):
        self.calls += 1
        if self.side_effect is not None:
            self.side_effect()
        if self.error is not None:
            raise self.error
