"""
Timeline engine for the animation sequencer.
Handles timeline state, segment scheduling, and playback control.
"""

import logging
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple, Union

from ..clock import Clock
from ..config import SequencerConfig
from ..events import CANCEL, FINISH, PAUSE, PLAY, SET, EventBus
from ..targets import TargetResolver
from .animation import Easing, KeyframeAnimation, resolve_easing
from .keyframes import Keyframe, normalize_keyframes
from .models import AnimationOptions, Controller, InvalidArgument, PlayState, Segment, is_number
from .presets import PresetRegistry

logger = logging.getLogger('timeline')

ControllerFactory = Callable[[Any, Tuple[Keyframe, ...], float, Easing], Controller]
Options = Union[Dict[str, Any], AnimationOptions]


class Timeline(Controller):
    """
    Master timeline that plays child controllers on one time axis.

    Segments are added with add(); each one plays a controller between two
    absolute offsets. The timeline subscribes to a Clock and on every tick
    moves its current time by delta * playback_rate, finishing when it
    leaves [0, duration], and starts the controllers whose window contains
    the current time.

    Lifecycle methods (play, pause, cancel, finish) apply the transition
    and then announce the same topic to listeners registered with on().
    A Timeline is itself a Controller, so timelines nest.
    """

    def __init__(
        self,
        clock: Optional[Clock] = None,
        resolver: Optional[TargetResolver] = None,
        presets: Optional[PresetRegistry] = None,
        controller_factory: Optional[ControllerFactory] = None,
        config: Optional[SequencerConfig] = None,
        autoplay: Optional[bool] = None
    ):
        self.config = config or SequencerConfig()
        self.clock = clock or Clock(fps=self.config.fps)
        self.resolver = resolver or TargetResolver()
        self.presets = presets or PresetRegistry()
        self.padding: float = self.config.padding
        self._controller_factory = controller_factory or self._create_animation

        # Playback
        self._duration: float = 0.0
        self._current_time: Optional[float] = None
        self._play_state: PlayState = PlayState.IDLE
        self._playback_rate: float = 1.0
        self._clock_handle: Optional[int] = None

        # Segment table, in insertion order
        self._segments: List[Segment] = []

        # Listeners see lifecycle topics after the timeline has acted on them
        self._events = EventBus()
        self._transitions: Dict[str, Callable[[], None]] = {
            PLAY: self._on_play,
            PAUSE: self._on_pause,
            CANCEL: self._on_cancel,
            FINISH: self._on_finish,
        }

        if self.config.autoplay if autoplay is None else autoplay:
            self.play()

    # === Properties ===

    @property
    def duration(self) -> float:
        return self._duration

    @property
    def segments(self) -> Tuple[Segment, ...]:
        return tuple(self._segments)

    @property
    def current_time(self) -> Optional[float]:
        return self._current_time

    @current_time.setter
    def current_time(self, value: Optional[float]):
        """
        Move the timeline to a time and seek every child to match.

        Children are only seeked, never started; starting happens on the
        next tick, and every segment may start again after a seek.
        """
        if value is not None and not is_number(value):
            raise InvalidArgument("current_time", f"Current time must be a number, got: {value!r}")

        self._reset_activation()
        if value is None:
            self._current_time = None
            return

        self._current_time = float(value)
        for segment in self._segments:
            segment.controller.seek(segment.local_time(self._current_time))

    @property
    def playback_rate(self) -> float:
        return self._playback_rate

    @playback_rate.setter
    def playback_rate(self, value: float):
        if not is_number(value):
            raise InvalidArgument("playback_rate", f"Playback rate must be a number, got: {value!r}")
        value = float(value)
        if (value < 0) != (self._playback_rate < 0):
            self._reset_activation()
        self._playback_rate = value

    @property
    def play_state(self) -> PlayState:
        return self._play_state

    @play_state.setter
    def play_state(self, value: Union[PlayState, str]):
        """Set the state directly and announce it; no transition side effects run."""
        value = PlayState(value)
        self._play_state = value
        self._events.trigger(SET, "play_state", value)

    # === Scheduling ===

    def add(self, options: Union[Options, Sequence[Options]]) -> 'Timeline':
        """
        Schedule one or more animations.

        Every entry in one call is placed relative to the duration the
        timeline had before the call, so entries with default offsets
        start together right after everything added earlier; "from" and
        "to" shift an entry within that batch.

        Each options entry accepts:
            targets: Target reference(s), see TargetResolver.resolve
            name: Preset whose fields are used as defaults
            from: Start offset relative to the batch (default 0)
            to: End offset relative to the batch (default 0)
            duration: Length of each animation
            easing: Easing name
            keyframes (or props): Keyframes for each target
            controller: A ready-made Controller to schedule instead of targets

        Raises:
            InvalidArgument: Unknown preset, bad numbers, or a controller
                that is already scheduled
        """
        batch = list(options) if isinstance(options, (list, tuple)) else [options]
        basis = self._duration

        added: List[Segment] = []
        for entry in batch:
            added.extend(self._build_segments(entry, basis, added))

        self._segments.extend(added)
        self._recalculate()
        logger.info(
            f"Added {len(added)} segment(s) at {basis:.1f}ms, duration now {self._duration:.1f}ms"
        )
        return self

    # === Playback control ===

    def play(self) -> 'Timeline':
        """Start or resume playback on the next tick."""
        return self._request(PLAY)

    def pause(self) -> 'Timeline':
        return self._request(PAUSE)

    def cancel(self) -> 'Timeline':
        """Stop, cancel every child and discard all segments."""
        return self._request(CANCEL)

    def finish(self) -> 'Timeline':
        """Stop and finish every child. Current time is reset to 0."""
        return self._request(FINISH)

    def reverse(self) -> 'Timeline':
        self.playback_rate = -self._playback_rate
        return self

    def on(self, topic: str, listener: Callable[..., Any]) -> 'Timeline':
        self._events.on(topic, listener)
        return self

    def off(self, topic: str, listener: Callable[..., Any]) -> 'Timeline':
        self._events.off(topic, listener)
        return self

    # === Controller ===

    def seek(self, time: float):
        self.current_time = time

    def set_playback_rate(self, rate: float):
        self.playback_rate = rate

    def total_duration(self) -> float:
        return self._duration

    def get_status(self) -> Dict[str, Any]:
        """Get current timeline status for display."""
        return {
            "state": self._play_state.value,
            "current_time": self._current_time,
            "duration": self._duration,
            "playback_rate": self._playback_rate,
            "segments": len(self._segments),
            "active": sum(
                1 for s in self._segments
                if s.controller.play_state in (PlayState.RUNNING, PlayState.PENDING)
            ),
        }

    def __repr__(self) -> str:
        return (
            f"Timeline(state={self._play_state.value}, current_time={self._current_time}, "
            f"duration={self._duration}, rate={self._playback_rate}, segments={len(self._segments)})"
        )

    # === Private Methods ===

    def _request(self, topic: str) -> 'Timeline':
        """Apply a lifecycle transition, then announce it."""
        self._transitions[topic]()
        self._events.trigger(topic, self)
        return self

    def _on_play(self):
        # Every play() re-enters pending, even when already pending or
        # running; only the clock subscription is guarded.
        self._play_state = PlayState.PENDING
        self._reset_activation()
        if self._clock_handle is None:
            self._clock_handle = self.clock.subscribe(self._on_tick)
        logger.info(f"Playing from {self._format_time()} at rate {self._playback_rate}")

    def _on_pause(self):
        self._release_clock()
        self._play_state = PlayState.PAUSED
        for segment in self._segments:
            segment.controller.pause()
        logger.info(f"Paused at {self._format_time()}")

    def _on_cancel(self):
        self._release_clock()
        self._current_time = None
        self._play_state = PlayState.IDLE
        for segment in self._segments:
            segment.controller.cancel()
        self._segments.clear()
        self._duration = 0.0
        logger.info("Cancelled")

    def _on_finish(self):
        self._release_clock()
        self._current_time = 0.0
        self._play_state = PlayState.FINISHED
        for segment in self._segments:
            segment.controller.finish()
        logger.info("Playback complete")

    def _on_tick(self, delta: float, elapsed: float):
        """Advance time by one clock tick and start segments that are due."""
        play_state = self._play_state

        if play_state == PlayState.IDLE:
            self.cancel()
            return
        if play_state == PlayState.FINISHED:
            self.finish()
            return
        if play_state == PlayState.PAUSED:
            self.pause()
            return

        # running/pending
        playback_rate = self._playback_rate
        is_reversed = playback_rate < 0
        start_time = self._duration if is_reversed else 0.0
        end_time = 0.0 if is_reversed else self._duration

        if play_state == PlayState.PENDING:
            if self._current_time is None or self._current_time == end_time:
                self._current_time = start_time
            self._play_state = PlayState.RUNNING

        current_time = self._current_time + delta * playback_rate
        self._current_time = current_time

        if not min(start_time, end_time) <= current_time <= max(start_time, end_time):
            self.finish()
            return

        for segment in self._segments:
            if not segment.is_due(current_time, playback_rate, self.padding):
                continue
            controller = segment.controller
            controller.set_playback_rate(playback_rate)
            if segment.activated:
                continue
            segment.activated = True
            if controller.play_state not in (PlayState.RUNNING, PlayState.PENDING):
                logger.debug(
                    f"Starting segment {segment.start_offset:.1f}-{segment.end_offset:.1f}ms "
                    f"at {current_time:.1f}ms"
                )
                controller.play()

    def _release_clock(self):
        if self._clock_handle is not None:
            self.clock.unsubscribe(self._clock_handle)
            self._clock_handle = None

    def _reset_activation(self):
        for segment in self._segments:
            segment.activated = False

    def _recalculate(self):
        self._duration = max((s.end_offset for s in self._segments), default=0.0)

    def _build_segments(self, entry: Options, basis: float, pending: List[Segment]) -> List[Segment]:
        """Turn one options entry into segments placed after basis."""
        options = self._merge_preset(self._options_dict(entry))

        start = self._number(options, "from", 0.0) + basis
        to = self._number(options, "to", 0.0) + basis

        controller = options.get("controller")
        if controller is not None:
            self._check_ownership(controller, pending)
            end = max(to, start + controller.total_duration())
            return [Segment(start, end, controller)]

        if options.get("duration") is None and options.get("to") is None:
            raise InvalidArgument("duration", "Animation needs a duration or a 'to' offset")
        length = self._number(options, "duration", 0.0)
        if length < 0:
            raise InvalidArgument("duration", f"Duration must not be negative, got: {length}")
        end = max(to, start + length)

        targets = self.resolver.resolve(options.get("targets"))
        easing = resolve_easing(options.get("easing"), self.config.default_easing)
        keyframes = normalize_keyframes(options.get("keyframes"))

        if not targets:
            logger.warning(f"No targets matched {options.get('targets')!r}; nothing scheduled")

        return [
            Segment(start, end, self._controller_factory(target, keyframes, end - start, easing))
            for target in targets
        ]

    def _options_dict(self, entry: Options) -> Dict[str, Any]:
        if isinstance(entry, AnimationOptions):
            return entry.to_dict()
        if isinstance(entry, dict):
            return AnimationOptions.from_dict(entry).to_dict()
        raise InvalidArgument("options", f"Expected a dict or AnimationOptions, got: {type(entry).__name__}")

    def _merge_preset(self, options: Dict[str, Any]) -> Dict[str, Any]:
        """Fill unset fields from the named preset, if any."""
        name = options.get("name")
        if not name:
            return options

        preset = self.presets.lookup(name)
        if preset is None:
            raise InvalidArgument("name", f"Unknown preset: {name}")

        merged = AnimationOptions.from_dict(preset).to_dict()
        merged.update(options)
        return merged

    def _check_ownership(self, controller: Controller, pending: List[Segment]):
        if controller is self:
            raise InvalidArgument("controller", "A timeline cannot contain itself")
        for segment in self._segments + pending:
            if segment.controller is controller:
                raise InvalidArgument("controller", "Controller is already scheduled on this timeline")

    def _create_animation(
        self, target: Any, keyframes: Tuple[Keyframe, ...], duration: float, easing: Easing
    ) -> Controller:
        return KeyframeAnimation(target, keyframes, duration, self.clock, easing)

    @staticmethod
    def _number(options: Dict[str, Any], key: str, default: float) -> float:
        value = options.get(key)
        if value is None:
            return default
        if not is_number(value):
            raise InvalidArgument(key, f"'{key}' must be a number, got: {value!r}")
        return float(value)

    def _format_time(self) -> str:
        return "start" if self._current_time is None else f"{self._current_time:.1f}ms"
