"""
Animation Sequencer
Plays many independently running animations on one master timeline.
"""

from .clock import Clock
from .config import SequencerConfig
from .events import EventBus
from .exceptions import InvalidArgument, SequencerError
from .targets import Target, TargetResolver
from .timeline import PlayState, PresetRegistry, Timeline

__version__ = "0.1.0"

__all__ = [
    'Timeline',
    'PlayState',
    'Clock',
    'EventBus',
    'Target',
    'TargetResolver',
    'PresetRegistry',
    'SequencerConfig',
    'InvalidArgument',
    'SequencerError',
]
