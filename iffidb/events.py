"""
Change Notifier

In-process publish/subscribe bus. Mutating record operations publish;
views subscribe and re-read whatever they display.

DESIGN DECISION: The notifier is an object created alongside the store and
passed to whoever needs it. Each subscription is its own registration, so
the same callable subscribed twice yields two independent handles.
"""

from typing import Callable

import structlog


Listener = Callable[[], None]
Unsubscribe = Callable[[], None]

logger = structlog.get_logger(__name__)


class _Registration:
    __slots__ = ("listener",)

    def __init__(self, listener: Listener):
        self.listener = listener


class ChangeNotifier:
    """
    Synchronous publish/subscribe bus.

    GUARANTEES:
    - Listeners run in registration order
    - Listeners added during a publish wait for the next publish
    - A failing listener is logged and the remaining ones still run
    """

    def __init__(self):
        self._registrations: list[_Registration] = []

    def subscribe(self, listener: Listener) -> Unsubscribe:
        """
        Register listener and return a handle that removes it.

        Calling the handle more than once is a no-op.
        """
        registration = _Registration(listener)
        self._registrations.append(registration)

        def unsubscribe() -> None:
            self._registrations = [
                r for r in self._registrations if r is not registration
            ]

        return unsubscribe

    def publish(self) -> int:
        """
        Invoke every registered listener.

        Returns the number of listeners that raised.
        """
        failures = 0
        for registration in list(self._registrations):
            try:
                registration.listener()
            except Exception:
                failures += 1
                logger.exception(
                    "listener_failed",
                    listener=getattr(registration.listener, "__qualname__", repr(registration.listener)),
                )
        return failures

    def __len__(self) -> int:
        return len(self._registrations)
