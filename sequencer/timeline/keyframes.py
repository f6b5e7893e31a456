"""
Keyframe normalization for keyframe animations.

Turns user keyframes such as
    [{"opacity": 0}, {"opacity": 0.8, "offset": 0.25}, {"opacity": 1}]
into an ordered tuple of Keyframe records with every offset filled in.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Tuple

from .models import InvalidArgument, is_number

RESERVED_KEYS = ("offset", "easing")


@dataclass(frozen=True)
class Keyframe:
    """A set of property values at a relative offset (0-1) of an animation."""
    offset: float
    properties: Dict[str, Any] = field(default_factory=dict)
    easing: Optional[str] = None


def expand_keyframe(raw: Dict[str, Any]) -> List[Dict[str, Any]]:
    """
    Expand list-valued properties into one keyframe per value.

    {"opacity": [0, 1]} becomes [{"opacity": 0}, {"opacity": 1}]. Other
    properties (and offset/easing) are copied to every expanded frame.
    """
    lists = {k: v for k, v in raw.items() if k not in RESERVED_KEYS and isinstance(v, (list, tuple))}
    if not lists:
        return [dict(raw)]

    length = max(len(v) for v in lists.values())
    frames = []
    for i in range(length):
        frame = {k: v for k, v in raw.items() if k not in lists}
        for key, values in lists.items():
            if values:
                frame[key] = values[min(i, len(values) - 1)]
        frames.append(frame)
    return frames


def normalize_properties(raw: Dict[str, Any]) -> Dict[str, Any]:
    """
    Normalize property names and values of one keyframe.

    Names are lower-cased with dashes turned into underscores
    ("background-Color" -> "background_color"); numeric strings become floats.
    """
    result = {}
    for key, value in raw.items():
        if key in RESERVED_KEYS:
            result[key] = value
            continue
        name = key.replace("-", "_").lower()
        if isinstance(value, str):
            try:
                value = float(value)
            except ValueError:
                pass
        result[name] = value
    return result


def space_keyframes(frames: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """
    Fill in missing offsets.

    The first frame defaults to 0 and the last to 1; runs of frames without
    offsets are spaced evenly between their neighbours.
    """
    if not frames:
        return []

    offsets: List[Optional[float]] = [f.get("offset") for f in frames]
    for offset in offsets:
        if offset is not None and not is_number(offset):
            raise InvalidArgument("keyframes", f"Keyframe offset must be a number, got: {offset!r}")
    if offsets[0] is None:
        offsets[0] = 0.0
    if len(offsets) > 1 and offsets[-1] is None:
        offsets[-1] = 1.0

    i = 0
    while i < len(offsets):
        if offsets[i] is not None:
            i += 1
            continue
        # find the next frame with a known offset
        j = i
        while offsets[j] is None:
            j += 1
        lo, hi = offsets[i - 1], offsets[j]
        gap = j - i + 1
        for k in range(i, j):
            offsets[k] = lo + (hi - lo) * (k - i + 1) / gap
        i = j

    return [dict(frame, offset=offset) for frame, offset in zip(frames, offsets)]


def validate_keyframes(frames: List[Dict[str, Any]]) -> Tuple[Keyframe, ...]:
    """Check offsets are numbers in [0, 1] in non-decreasing order and build Keyframes."""
    result = []
    previous = 0.0
    for frame in frames:
        offset = frame["offset"]
        if not is_number(offset) or not 0.0 <= offset <= 1.0:
            raise InvalidArgument("keyframes", f"Keyframe offset must be within [0, 1], got: {offset}")
        if offset < previous:
            raise InvalidArgument("keyframes", f"Keyframe offsets out of order at {offset}")
        previous = offset
        properties = {k: v for k, v in frame.items() if k not in RESERVED_KEYS}
        result.append(Keyframe(offset=float(offset), properties=properties, easing=frame.get("easing")))
    return tuple(result)


def normalize_keyframes(raw: Optional[Iterable[Dict[str, Any]]]) -> Tuple[Keyframe, ...]:
    """Run the full pipeline: expand, normalize properties, space, validate."""
    if raw is None:
        return ()
    if isinstance(raw, dict):
        raw = [raw]

    expanded = []
    for frame in raw:
        if not isinstance(frame, dict):
            raise InvalidArgument("keyframes", f"Keyframe must be a mapping, got: {type(frame).__name__}")
        expanded.extend(expand_keyframe(frame))

    normalized = [normalize_properties(f) for f in expanded]
    return validate_keyframes(space_keyframes(normalized))
