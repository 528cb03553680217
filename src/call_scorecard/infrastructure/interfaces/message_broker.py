"""Abstract interface for notification delivery."""

from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any

NotificationCallback = Callable[[bytes, int, dict[str, Any] | None], None]


class MessageBroker(ABC):
    """
    Delivers storage notifications to one stage, at least once.

    Every delivery is settled exactly once through ``acknowledge``,
    ``reject`` or ``dead_letter``.
    """

    @abstractmethod
    def acknowledge(self, delivery_tag: int) -> None:
        """Settles a delivery whose events were all handled."""

    @abstractmethod
    def reject(self, delivery_tag: int) -> None:
        """Settles a delivery for redelivery, up to the queue's delivery limit."""

    @abstractmethod
    def dead_letter(self, delivery_tag: int) -> None:
        """Settles a delivery that must not be retried, parking it for inspection."""

    @abstractmethod
    def consume(self, callback: NotificationCallback) -> None:
        """
        Blocks, passing each delivery to ``callback``.

        Args:
            callback: Called with (body, delivery_tag, headers); headers may
                carry the broker's delivery count.
        """

    @abstractmethod
    def setup(self) -> None:
        """Declares the stage's queue, its binding and its dead-letter route."""
