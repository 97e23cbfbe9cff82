"""Named-event hub connecting plugins without direct calls.

Plugins never call each other. They publish diagnostics (:attr:`Topic.WARN`,
:attr:`Topic.ERROR`) and subscribe to lifecycle points of the run
(:attr:`Topic.START_ALL`, :attr:`Topic.PLUGINS_DONE`, :attr:`Topic.END_ALL`,
:attr:`Topic.BEFORE_SAVE`). One :class:`PubSubHub` exists per
document-processing run and travels in the
:class:`~netage.plugins.runner.RunContext`.

Delivery is synchronous: :meth:`PubSubHub.pub` calls every handler that is
subscribed at publish time, in subscription order, before it returns.
Nothing is queued or replayed for late subscribers.

Example::

    hub = PubSubHub()
    hub.sub(Topic.WARN, lambda message: print(message))
    hub.sub(Topic.END_ALL, finalize, once=True)
    hub.pub(Topic.WARN, "specStatus missing")
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)


class Topic(str, enum.Enum):
    """Event names understood by the hub."""

    WARN = "warn"
    ERROR = "error"
    START_ALL = "start-all"
    PLUGINS_DONE = "plugins-done"
    END_ALL = "end-all"
    BEFORE_SAVE = "beforesave"


Handler = Callable[..., Any]


@dataclass(eq=False)
class Subscription:
    """Handle returned by :meth:`PubSubHub.sub`, used to unsubscribe.

    Attributes:
        topic: The topic the handler listens to.
        handler: The callable invoked with the published payload.
        once: Whether the subscription is removed after the first delivery.
    """

    topic: Topic
    handler: Handler
    once: bool = False


class PubSubHub:
    """Synchronous one-to-many event bus.

    A handler that raises does not stop delivery to the remaining
    handlers: the failure is logged and re-published as
    :attr:`Topic.ERROR` (failures inside ``error`` handlers are only
    logged, to avoid a feedback loop).
    """

    def __init__(self) -> None:
        self._subscriptions: dict[Topic, list[Subscription]] = {}

    def sub(self, topic: Topic | str, handler: Handler, once: bool = False) -> Subscription:
        """Register *handler* for *topic*.

        Args:
            topic: A :class:`Topic` or its string value.
            handler: Callable receiving the payload published with the event.
            once: Remove the subscription after its first delivery, so the
                handler fires at most once even if the event repeats.

        Returns:
            The :class:`Subscription`, to pass to :meth:`unsub`.
        """
        subscription = Subscription(Topic(topic), handler, once)
        self._subscriptions.setdefault(subscription.topic, []).append(subscription)
        return subscription

    def unsub(self, subscription: Subscription) -> bool:
        """Remove *subscription*. Returns ``False`` if it was not registered."""
        subs = self._subscriptions.get(subscription.topic, [])
        if subscription in subs:
            subs.remove(subscription)
            return True
        return False

    def pub(self, topic: Topic | str, *payload: Any) -> int:
        """Deliver *payload* to every current subscriber of *topic*.

        Returns:
            The number of handlers invoked.
        """
        topic = Topic(topic)
        # Snapshot: handlers may subscribe or unsubscribe while we deliver.
        subs = list(self._subscriptions.get(topic, []))
        for subscription in subs:
            if subscription.once:
                self.unsub(subscription)
            try:
                subscription.handler(*payload)
            except Exception as exc:
                name = getattr(subscription.handler, "__name__", repr(subscription.handler))
                logger.exception("Handler %s failed on '%s'", name, topic.value)
                if topic is not Topic.ERROR:
                    self.pub(Topic.ERROR, f"Error when calling handler {name}: {exc}", exc)
        return len(subs)

    def subscribers(self, topic: Topic | str) -> int:
        """Return how many handlers are currently subscribed to *topic*."""
        return len(self._subscriptions.get(Topic(topic), []))

    def clear(self, topic: Optional[Topic | str] = None) -> None:
        """Drop every subscription, or only those for *topic*."""
        if topic is None:
            self._subscriptions.clear()
        else:
            self._subscriptions.pop(Topic(topic), None)
