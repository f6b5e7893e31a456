"""
Event bus for sequencer lifecycle notifications.
Synchronous publish/subscribe keyed by string topic.
"""

import logging
from typing import Any, Callable, Dict, List

logger = logging.getLogger('events')

# Lifecycle topics announced by timelines
PLAY = "play"
PAUSE = "pause"
CANCEL = "cancel"
FINISH = "finish"
SET = "set"  # observable property changed: (name, value)

LIFECYCLE_TOPICS = (PLAY, PAUSE, CANCEL, FINISH)


class EventBus:
    """
    Minimal publish/subscribe dispatcher.

    Listeners are called in registration order, synchronously, with the
    arguments given to trigger(). Nothing is buffered: a listener added
    after an event was triggered never sees it.
    """

    def __init__(self):
        self._listeners: Dict[str, List[Callable[..., Any]]] = {}

    def on(self, topic: str, listener: Callable[..., Any]):
        """Subscribe a listener to a topic."""
        if not callable(listener):
            raise TypeError(f"Listener for '{topic}' must be callable")
        self._listeners.setdefault(topic, []).append(listener)

    def off(self, topic: str, listener: Callable[..., Any]) -> bool:
        """Unsubscribe a listener. Returns False if it was not registered."""
        listeners = self._listeners.get(topic)
        if not listeners or listener not in listeners:
            return False
        listeners.remove(listener)
        if not listeners:
            del self._listeners[topic]
        return True

    def trigger(self, topic: str, *args: Any) -> int:
        """
        Call every listener of a topic with args.

        Iterates over a snapshot so listeners may subscribe or unsubscribe
        while being called. Listener exceptions propagate to the caller.

        Returns:
            Number of listeners called
        """
        listeners = list(self._listeners.get(topic, ()))
        for listener in listeners:
            listener(*args)
        if listeners:
            logger.debug(f"Dispatched '{topic}' to {len(listeners)} listener(s)")
        return len(listeners)

    def listener_count(self, topic: str) -> int:
        return len(self._listeners.get(topic, ()))

    def clear(self):
        """Remove all listeners."""
        self._listeners.clear()
