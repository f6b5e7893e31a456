"""Shared pytest fixtures for the sequencer test suite.

Timelines are driven by a Clock stepped by hand with advance(), so every
test controls exactly which ticks are delivered.
"""

from __future__ import annotations

import logging
from typing import List, Optional

import pytest

from sequencer.clock import Clock
from sequencer.config import SequencerConfig
from sequencer.targets import Target, TargetResolver
from sequencer.timeline import Controller, PlayState, Timeline


class RecordingController(Controller):
    """Controller double that records every call made to it."""

    def __init__(self, duration: float = 100.0, name: str = "", log: Optional[List] = None):
        self.duration = duration
        self.name = name
        self.calls: List[tuple] = []
        self.rate = 1.0
        self._state = PlayState.IDLE
        self._log = log

    def _record(self, *call):
        self.calls.append(call)
        if self._log is not None:
            self._log.append((self.name,) + call)

    def count(self, method: str) -> int:
        return sum(1 for c in self.calls if c[0] == method)

    def play(self):
        self._record("play")
        self._state = PlayState.RUNNING

    def pause(self):
        self._record("pause")
        self._state = PlayState.PAUSED

    def cancel(self):
        self._record("cancel")
        self._state = PlayState.IDLE

    def finish(self):
        self._record("finish")
        self._state = PlayState.FINISHED

    def seek(self, time):
        self._record("seek", time)

    def set_playback_rate(self, rate):
        self.rate = rate

    def reverse(self):
        self.rate *= -1

    def total_duration(self):
        return self.duration

    @property
    def play_state(self):
        return self._state

    @play_state.setter
    def play_state(self, value):
        self._state = value


@pytest.fixture
def clock():
    return Clock(fps=60.0)


@pytest.fixture
def resolver():
    return TargetResolver([
        Target(name="box", id="box1", tags={"shape"}),
        Target(name="circle", id="circle1", tags={"shape"}),
        Target(name="caption", id="caption1", tags={"text"}),
    ])


@pytest.fixture
def timeline(clock, resolver):
    """A timeline that has not been started."""
    return Timeline(clock=clock, resolver=resolver, config=SequencerConfig(), autoplay=False)


@pytest.fixture
def make_controller():
    def _make(duration: float = 100.0, name: str = "", log: Optional[List] = None) -> RecordingController:
        return RecordingController(duration=duration, name=name, log=log)
    return _make


@pytest.fixture
def events(timeline):
    """List of (topic, state) pairs announced by the timeline fixture."""
    seen = []
    for topic in ("play", "pause", "cancel", "finish"):
        timeline.on(topic, lambda source, topic=topic: seen.append((topic, source.play_state)))
    return seen


@pytest.fixture
def restore_root_logger():
    """Undo configure_logging() changes to the root logger after a test."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)
    logging.getLogger("events").setLevel(logging.NOTSET)
