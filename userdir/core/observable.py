"""Observable state base class"""

from typing import Any, Callable, List

from ..utils.logger import get_logger

logger = get_logger(__name__)

Observer = Callable[[str, Any], None]


class Observable:
    """
    Notifies observers on every change of a public attribute.

    Observers are called synchronously with (field, new_value) from inside
    the assignment, so a change is visible to them before the operation
    that made it continues. Private attributes (leading underscore) are
    not observed. Lists must be reassigned, not mutated in place, to notify.
    """

    def __init__(self):
        object.__setattr__(self, "_observers", [])

    def subscribe(self, observer: Observer) -> Callable[[], None]:
        """Register an observer. Returns a function that unsubscribes it."""
        self._observers.append(observer)

        def unsubscribe() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return unsubscribe

    def __setattr__(self, name: str, value: Any) -> None:
        if name.startswith("_"):
            object.__setattr__(self, name, value)
            return

        missing = object()
        old = self.__dict__.get(name, missing)
        object.__setattr__(self, name, value)
        if old is missing or old != value:
            self._notify(name, value)

    def _notify(self, field: str, value: Any) -> None:
        observers: List[Observer] = list(self._observers)
        for observer in observers:
            try:
                observer(field, value)
            except Exception as e:
                logger.error("Observer failed", field=field, error=str(e), exc_info=True)
