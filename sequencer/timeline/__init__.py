"""
Timeline module for the animation sequencer.
Provides the timeline engine, segment models, keyframe animations and presets.
"""

from .animation import EASING_FUNCTIONS, EASINGS, KeyframeAnimation
from .keyframes import Keyframe, normalize_keyframes
from .models import AnimationOptions, Controller, InvalidArgument, PlayState, Segment
from .presets import PresetRegistry
from .timeline_engine import Timeline

__all__ = [
    'Timeline',
    'PlayState',
    'Segment',
    'Controller',
    'AnimationOptions',
    'InvalidArgument',
    'KeyframeAnimation',
    'Keyframe',
    'normalize_keyframes',
    'PresetRegistry',
    'EASINGS',
    'EASING_FUNCTIONS',
]
