"""
Sequencer Configuration - Centralized configuration management.

Provides:
- Type-safe configuration dataclass
- Loading/saving from JSON/environment
"""

import json
import os
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Optional

# One frame at 30fps: how far into a segment playback must be before the
# timeline starts it, so a segment that just finished is not restarted.
DEFAULT_PADDING = 1.0 / 30


def _env_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class SequencerConfig:
    """Timeline and clock configuration."""

    # Scheduling
    padding: float = DEFAULT_PADDING  # Activation padding in timeline units (ms)
    autoplay: bool = True  # Timelines start pending on creation

    # Clock
    fps: float = 60.0  # Frame rate of the asyncio clock loop

    # Animations
    default_easing: str = "linear"

    # Logging
    log_level: str = "INFO"

    def __post_init__(self):
        if self.padding < 0:
            raise ValueError(f"padding must not be negative, got: {self.padding}")
        if self.fps <= 0:
            raise ValueError(f"fps must be positive, got: {self.fps}")

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "SequencerConfig":
        """Create from dictionary."""
        return cls(**{k: v for k, v in data.items() if k in cls.__dataclass_fields__})

    @classmethod
    def from_env(cls) -> "SequencerConfig":
        """Load configuration from environment variables."""
        return cls(
            padding=float(os.environ.get("SEQUENCER_PADDING", str(DEFAULT_PADDING))),
            autoplay=_env_bool(os.environ.get("SEQUENCER_AUTOPLAY", "true")),
            fps=float(os.environ.get("SEQUENCER_FPS", "60")),
            default_easing=os.environ.get("SEQUENCER_DEFAULT_EASING", "linear"),
            log_level=os.environ.get("SEQUENCER_LOG_LEVEL", "INFO"),
        )

    def save(self, path: Path) -> None:
        """Save configuration to JSON file."""
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            json.dump(self.to_dict(), f, indent=2)

    @classmethod
    def load(cls, path: Path) -> "SequencerConfig":
        """Load configuration from JSON file."""
        if not path.exists():
            return cls()

        with open(path) as f:
            data = json.load(f)

        return cls.from_dict(data)


# Default config file location
DEFAULT_CONFIG_PATH = Path.home() / ".config" / "sequencer" / "config.json"


def load_config(path: Optional[Path] = None) -> SequencerConfig:
    """Load configuration from file or return defaults."""
    if path is None:
        path = DEFAULT_CONFIG_PATH
    return SequencerConfig.load(path)


def save_config(config: SequencerConfig, path: Optional[Path] = None) -> None:
    """Save configuration to file."""
    if path is None:
        path = DEFAULT_CONFIG_PATH
    config.save(path)
