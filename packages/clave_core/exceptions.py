"""Custom exceptions for claveloop"""


class ClaveError(Exception):
    """Base exception for all claveloop errors"""
    pass


class ValidationError(ClaveError):
    """Malformed sequence text, subdivision, tempo, length or command"""
    pass


class EmptySequenceError(ClaveError):
    """Playback requested before any sequence was generated"""
    pass


class UnknownSoundError(ClaveError, KeyError):
    """Logical sound name not present in the sound bank"""

    def __str__(self) -> str:
        # KeyError.__str__ would repr() the message
        return str(self.args[0]) if self.args else ""
