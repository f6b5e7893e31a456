"""
Keyframe animation controller for sequencer timelines.
Plays normalized keyframes on a single target, driven by the shared clock.
"""

import logging
import math
from collections.abc import MutableMapping
from typing import Any, Callable, Dict, Optional, Sequence, Union

import numpy as np

from ..clock import Clock
from .keyframes import Keyframe
from .models import Controller, InvalidArgument, PlayState, is_number

logger = logging.getLogger('keyframe_animation')


# Easing functions, keyed by the identifiers KeyframeAnimation understands
def _ease_linear(t: float) -> float:
    return t


def _ease_in_quad(t: float) -> float:
    return t * t


def _ease_out_quad(t: float) -> float:
    return t * (2 - t)


def _ease_in_out_quad(t: float) -> float:
    return 2 * t * t if t < 0.5 else -1 + (4 - 2 * t) * t


def _ease_in_cubic(t: float) -> float:
    return t * t * t


def _ease_out_cubic(t: float) -> float:
    return 1 - (1 - t) ** 3


def _ease_in_out_cubic(t: float) -> float:
    return 4 * t * t * t if t < 0.5 else 1 - (-2 * t + 2) ** 3 / 2


def _ease_in_out_sine(t: float) -> float:
    return 0.5 * (1 - math.cos(math.pi * t))


def _ease_step_end(t: float) -> float:
    return 1.0 if t >= 1.0 else 0.0


EASING_FUNCTIONS: Dict[str, Callable[[float], float]] = {
    "linear": _ease_linear,
    "ease_in": _ease_in_quad,
    "ease_out": _ease_out_quad,
    "ease_in_out": _ease_in_out_quad,
    "ease_in_cubic": _ease_in_cubic,
    "ease_out_cubic": _ease_out_cubic,
    "ease_in_out_cubic": _ease_in_out_cubic,
    "sine": _ease_in_out_sine,
    "step_end": _ease_step_end,
}

# Friendly easing names accepted in animation options
EASINGS: Dict[str, str] = {
    "easeInQuad": "ease_in",
    "easeOutQuad": "ease_out",
    "easeInOutQuad": "ease_in_out",
    "easeInCubic": "ease_in_cubic",
    "easeOutCubic": "ease_out_cubic",
    "easeInOutCubic": "ease_in_out_cubic",
    "easeInOutSine": "sine",
    "ease-in": "ease_in",
    "ease-out": "ease_out",
    "ease-in-out": "ease_in_out",
    "step-end": "step_end",
}

Easing = Union[str, Callable[[float], float]]

_MISSING = object()


def resolve_easing(easing: Optional[Easing], default: str = "linear") -> Easing:
    """Map a friendly easing name to its identifier. Unknown names pass through."""
    if easing is None or easing == "":
        return default
    if isinstance(easing, str):
        return EASINGS.get(easing, easing)
    return easing


def easing_function(easing: Easing) -> Callable[[float], float]:
    """Get the callable for an easing identifier, falling back to linear."""
    if callable(easing):
        return easing
    fn = EASING_FUNCTIONS.get(easing)
    if fn is None:
        logger.warning(f"Unknown easing '{easing}', using linear")
        return _ease_linear
    return fn


def _property_map(target: Any) -> MutableMapping:
    """The mutable property store of a target entity."""
    if isinstance(target, MutableMapping):
        return target
    properties = getattr(target, "properties", None)
    if isinstance(properties, MutableMapping):
        return properties
    return target.__dict__


class KeyframeAnimation(Controller):
    """
    Plays a keyframe sequence on one target.

    Owns its local time (0 to duration), playback rate and play state.
    While running it is subscribed to the clock and writes interpolated
    property values to the target on every tick; it unsubscribes itself
    when it is paused, cancelled or reaches either end.
    """

    def __init__(
        self,
        target: Any,
        keyframes: Sequence[Keyframe],
        duration: float,
        clock: Clock,
        easing: Easing = "linear"
    ):
        if not is_number(duration) or duration < 0:
            raise InvalidArgument("duration", f"Duration must be a non-negative number, got: {duration}")

        self.target = target
        self.keyframes = tuple(keyframes)
        self.duration = float(duration)
        self.easing = easing
        self._easing_fn = easing_function(easing)
        self._clock = clock
        self._handle: Optional[int] = None

        self._state = PlayState.IDLE
        self._time: float = 0.0
        self._rate: float = 1.0
        self._initial: Optional[Dict[str, Any]] = None

        self._properties = []
        for kf in self.keyframes:
            for name in kf.properties:
                if name not in self._properties:
                    self._properties.append(name)

    @property
    def current_time(self) -> float:
        return self._time

    @property
    def playback_rate(self) -> float:
        return self._rate

    @property
    def progress(self) -> float:
        """Eased progress (0-1) at the current local time."""
        if self.duration == 0:
            return self._easing_fn(0.0 if self._rate < 0 else 1.0)
        return self._easing_fn(min(1.0, max(0.0, self._time / self.duration)))

    # === Controller ===

    @property
    def play_state(self) -> PlayState:
        return self._state

    @play_state.setter
    def play_state(self, value: PlayState):
        if value == PlayState.FINISHED:
            self.finish()
        elif value == PlayState.IDLE:
            self.cancel()
        elif value == PlayState.PAUSED:
            self.pause()
        elif value in (PlayState.RUNNING, PlayState.PENDING):
            self.play()

    def play(self):
        """Start or resume. No-op while running."""
        if self._state == PlayState.RUNNING:
            return

        # rewind when sitting at the far end for this direction
        if self._rate < 0 and self._time <= 0:
            self._time = self.duration
        elif self._rate >= 0 and self._time >= self.duration:
            self._time = 0.0

        self._state = PlayState.RUNNING
        if self._handle is None:
            self._handle = self._clock.subscribe(self._on_tick)
        self._apply()
        logger.debug(f"Playing {self._describe()} from {self._time:.1f}ms at rate {self._rate}")

    def pause(self):
        self._release()
        self._state = PlayState.PAUSED

    def cancel(self):
        """Stop and restore the target's values from before the animation."""
        self._release()
        self._state = PlayState.IDLE
        self._time = 0.0
        if self._initial is not None:
            store = _property_map(self.target)
            for name, value in self._initial.items():
                if value is _MISSING:
                    store.pop(name, None)
                else:
                    store[name] = value
            self._initial = None

    def finish(self):
        """Jump to the end for the current direction."""
        self._release()
        self._time = 0.0 if self._rate < 0 else self.duration
        self._state = PlayState.FINISHED
        self._apply()

    def seek(self, time: float):
        self._time = min(max(float(time), 0.0), self.duration)
        if self._state == PlayState.IDLE:
            self._state = PlayState.PAUSED
        self._apply()

    def set_playback_rate(self, rate: float):
        self._rate = rate

    def reverse(self):
        self._rate *= -1

    def total_duration(self) -> float:
        return self.duration

    # === Private Methods ===

    def _on_tick(self, delta: float, elapsed: float):
        if self._state != PlayState.RUNNING:
            return

        time = self._time + delta * self._rate
        if time >= self.duration and self._rate >= 0:
            self.finish()
        elif time <= 0 and self._rate < 0:
            self.finish()
        else:
            self._time = time
            self._apply()

    def _release(self):
        if self._handle is not None:
            self._clock.unsubscribe(self._handle)
            self._handle = None

    def _apply(self):
        """Write interpolated values for the current time to the target."""
        if not self.keyframes:
            return

        store = _property_map(self.target)
        if self._initial is None:
            self._initial = {name: store.get(name, _MISSING) for name in self._properties}

        for name, value in self.sample(self.progress).items():
            store[name] = value

    def sample(self, progress: float) -> Dict[str, Any]:
        """
        Property values at an eased progress.

        Numeric properties are interpolated between the keyframes that
        define them; anything else takes the value of the last keyframe
        at or before progress.
        """
        values = {}
        for name in self._properties:
            frames = [(k.offset, k.properties[name]) for k in self.keyframes if name in k.properties]
            if all(is_number(v) for _, v in frames):
                offsets = np.array([o for o, _ in frames], dtype=float)
                points = np.array([v for _, v in frames], dtype=float)
                values[name] = float(np.interp(progress, offsets, points))
            else:
                current = frames[0][1]
                for offset, value in frames:
                    if offset <= progress:
                        current = value
                values[name] = current
        return values

    def _describe(self) -> str:
        name = getattr(self.target, "name", None)
        return f"animation on {name}" if name else "animation"


