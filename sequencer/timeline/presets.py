"""
Named animation presets.
A preset is a partial options dict that Timeline.add() uses as defaults.
"""

import copy
import logging
from typing import Any, Dict, List, Optional

logger = logging.getLogger('presets')


# Built-in presets available to every registry
PRESETS: Dict[str, Dict[str, Any]] = {
    "fade_in": {
        "duration": 500,
        "easing": "ease-out",
        "keyframes": [{"opacity": 0}, {"opacity": 1}],
    },
    "fade_out": {
        "duration": 500,
        "easing": "ease-in",
        "keyframes": [{"opacity": 1}, {"opacity": 0}],
    },
    "pulse": {
        "duration": 800,
        "easing": "easeInOutSine",
        "keyframes": [{"scale": 1.0}, {"scale": 1.2}, {"scale": 1.0}],
    },
    "slide_in": {
        "duration": 600,
        "easing": "easeOutCubic",
        "keyframes": [{"x": -100, "opacity": 0}, {"x": 0, "opacity": 1}],
    },
}


class PresetRegistry:
    """Lookup table of named animation presets."""

    def __init__(self, presets: Optional[Dict[str, Dict[str, Any]]] = None, include_builtin: bool = True):
        self._presets: Dict[str, Dict[str, Any]] = {}
        if include_builtin:
            self._presets.update(copy.deepcopy(PRESETS))
        for name, options in (presets or {}).items():
            self.register(name, options)

    def register(self, name: str, options: Dict[str, Any]):
        """Add or replace a preset."""
        if not name:
            raise ValueError("Preset name must not be empty")
        if "name" in options:
            raise ValueError(f"Preset '{name}' must not reference another preset")
        self._presets[name] = copy.deepcopy(options)
        logger.debug(f"Registered preset: {name}")

    def lookup(self, name: str) -> Optional[Dict[str, Any]]:
        """Get a copy of a preset's options, or None if unknown."""
        options = self._presets.get(name)
        return copy.deepcopy(options) if options is not None else None

    def names(self) -> List[str]:
        return sorted(self._presets)

    def __contains__(self, name: str) -> bool:
        return name in self._presets
