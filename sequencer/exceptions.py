"""
Custom exception classes for the sequencer.
"""
from typing import Optional


class SequencerError(Exception):
    """Base exception for all sequencer errors."""
    pass


class InvalidArgument(SequencerError, ValueError):
    """Raised when animation options cannot be turned into segments."""

    def __init__(self, argument: str, message: Optional[str] = None):
        self.argument = argument
        super().__init__(message or f"Invalid argument: {argument}")


__all__ = ['SequencerError', 'InvalidArgument']
