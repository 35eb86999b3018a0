from typing import Optional


class PatchError(Exception):
    """Base class for everything the patch engine raises."""


class RangeError(PatchError, IndexError):
    """An offset falls outside the original text."""

    def __init__(self, start: int, end: int, size: int):
        self.start = start
        self.end = end
        self.size = size
        super().__init__(f"Range [{start}, {end}) is outside the original text (length {size})")


class OverlapError(PatchError, ValueError):
    """
    Two replacement patches partially overlap and neither contains the other.
    `first` is the patch that was already kept, `second` the one that collided with it.
    """

    def __init__(self, first, second, message: Optional[str] = None):
        self.first = first
        self.second = second
        if message is None:
            message = (
                f"Patch [{second.start}, {second.end}) (order {second.order}) partially overlaps "
                f"patch [{first.start}, {first.end}) (order {first.order})"
            )
        super().__init__(message)


class TemplateError(PatchError, ValueError):
    """A template edit could not be rendered against the context."""
