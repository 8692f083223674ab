"""Contract for the mutable object the history engine operates on."""

from typing import Any


class Subject:
    """
    Base class for objects managed by a HistoryEngine.

    Any object exposing ``capture_snapshot`` and ``restore_snapshot`` works; the
    engine never inspects the captured state.
    """

    def capture_snapshot(self) -> Any:
        """Return a deep, self-contained copy of the full observable state."""
        raise NotImplementedError

    def restore_snapshot(self, state: Any) -> None:
        """Replace the full observable state with ``state``."""
        raise NotImplementedError


def check_subject(subject: Any) -> None:
    """Raise TypeError if ``subject`` does not implement the snapshot contract."""
    for method in ("capture_snapshot", "restore_snapshot"):
        if not callable(getattr(subject, method, None)):
            raise TypeError(
                f"{type(subject).__name__} does not implement {method}()"
            )
