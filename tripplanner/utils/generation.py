class RequestGeneration:
    """Monotonic token source for discarding stale async results.

    Each fetch takes a token from ``begin()`` and only applies its result
    if ``is_current(token)`` still holds when it finishes. Starting a newer
    fetch, or calling ``invalidate()``, supersedes every older token.
    """

    def __init__(self):
        self._current = 0

    @property
    def current(self) -> int:
        return self._current

    def begin(self) -> int:
        self._current += 1
        return self._current

    def invalidate(self) -> None:
        self._current += 1

    def is_current(self, token: int) -> bool:
        return token == self._current
