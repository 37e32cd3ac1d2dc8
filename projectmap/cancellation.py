# projectmap/cancellation.py


class CancellationToken:
    """Cooperative cancellation flag polled by the scanner.

    Setting it never raises anything inside the core; traversal and
    accounting simply stop and return what they have.
    """

    def __init__(self):
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        self._cancelled = True

    def __repr__(self):
        return f"CancellationToken(cancelled={self._cancelled})"


def is_cancelled(token) -> bool:
    return token is not None and token.cancelled
