"""
Data models for the timeline system.
"""

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from ..exceptions import InvalidArgument


class PlayState(Enum):
    IDLE = "idle"
    PENDING = "pending"
    RUNNING = "running"
    PAUSED = "paused"
    FINISHED = "finished"


class Controller(ABC):
    """
    Anything that can be played on a timeline.

    A timeline drives its children only through these operations, so a
    nested Timeline and a KeyframeAnimation are interchangeable.
    """

    @abstractmethod
    def play(self):
        pass

    @abstractmethod
    def pause(self):
        pass

    @abstractmethod
    def cancel(self):
        pass

    @abstractmethod
    def finish(self):
        pass

    @abstractmethod
    def seek(self, time: float):
        """Move to a local time without changing play state."""
        pass

    @abstractmethod
    def set_playback_rate(self, rate: float):
        pass

    @abstractmethod
    def reverse(self):
        pass

    @abstractmethod
    def total_duration(self) -> float:
        pass

    @property
    @abstractmethod
    def play_state(self) -> PlayState:
        pass

    @play_state.setter
    @abstractmethod
    def play_state(self, value: PlayState):
        pass


@dataclass
class Segment:
    """A controller scheduled between two absolute offsets of its timeline."""
    start_offset: float
    end_offset: float
    controller: Controller
    activated: bool = field(default=False, compare=False, repr=False)  # started in this pass

    def __post_init__(self):
        if self.end_offset < self.start_offset:
            raise InvalidArgument(
                "to", f"Segment ends before it starts ({self.start_offset} > {self.end_offset})"
            )

    @property
    def duration(self) -> float:
        return self.end_offset - self.start_offset

    def window(self, playback_rate: float, padding: float) -> Tuple[float, float]:
        """
        Half-open activation window for the current direction.

        Padding is applied to the edge where playback enters the segment:
        the start when playing forward, the end when playing backward.
        """
        if playback_rate < 0:
            return self.start_offset, self.end_offset - padding
        return self.start_offset + padding, self.end_offset

    def is_due(self, time: float, playback_rate: float, padding: float) -> bool:
        lo, hi = self.window(playback_rate, padding)
        return lo <= time < hi

    def local_time(self, time: float) -> float:
        """Timeline time mapped into the controller's own [0, duration]."""
        return min(max(time - self.start_offset, 0.0), self.duration)


def is_number(value: Any) -> bool:
    """True for finite real numbers (bools excluded)."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


@dataclass
class AnimationOptions:
    """
    Options for one Timeline.add() entry.

    Unset fields stay None so that preset values can fill them in;
    to_dict() only emits fields that were given.
    """
    targets: Any = None
    name: Optional[str] = None      # preset to inherit from
    from_: Optional[float] = None   # "from" in dict form
    to: Optional[float] = None
    duration: Optional[float] = None
    easing: Any = None
    keyframes: Optional[List[Dict[str, Any]]] = None
    controller: Optional[Controller] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    _KEYS = ("targets", "name", "to", "duration", "easing", "keyframes", "controller")

    def to_dict(self) -> dict:
        result = dict(self.extra)
        for key in self._KEYS:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.from_ is not None:
            result["from"] = self.from_
        return result

    @classmethod
    def from_dict(cls, data: dict) -> 'AnimationOptions':
        known = set(cls._KEYS) | {"from", "props"}
        keyframes = data.get("keyframes")
        if keyframes is None:
            keyframes = data.get("props")
        return cls(
            targets=data.get("targets"),
            name=data.get("name"),
            from_=data.get("from"),
            to=data.get("to"),
            duration=data.get("duration"),
            easing=data.get("easing"),
            keyframes=keyframes,
            controller=data.get("controller"),
            extra={k: v for k, v in data.items() if k not in known}
        )
