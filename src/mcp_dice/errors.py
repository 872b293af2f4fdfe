from __future__ import annotations


class DiceError(ValueError):
    """User-facing validation errors (fail-fast, no roll performed)."""

    def __init__(self, message: str, fragment: str | None = None) -> None:
        super().__init__(message)
        self.fragment = fragment


class DiceSyntaxError(DiceError):
    """The notation does not match the dice grammar."""


class DiceLimitError(DiceError):
    """The notation is well-formed but asks for more dice than allowed."""
