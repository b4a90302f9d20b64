"""Callback recorder used as a dependency callback in tests."""

import threading
from collections import Counter
from typing import List


class CallbackRecorder:
    """Records every dependent property name it is called with."""

    def __init__(self):
        self.calls: List[str] = []
        self._lock = threading.Lock()

    def __call__(self, name: str) -> None:
        with self._lock:
            self.calls.append(name)

    def count(self, name: str) -> int:
        with self._lock:
            return self.calls.count(name)

    def counts(self) -> Counter:
        with self._lock:
            return Counter(self.calls)

    def clear(self) -> None:
        with self._lock:
            self.calls.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self.calls)
