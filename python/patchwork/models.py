from typing import Any, Callable, Protocol

from pydantic import BaseModel, ConfigDict, Field

# Render functions receive the caller's context and return replacement text.
Render = Callable[[Any], str]


class Patch(BaseModel):
    """
    One registered edit: the half-open range [start, end) of the original text,
    the registration order, and the function producing the replacement.
    """

    model_config = ConfigDict(frozen=True)

    start: int = Field(..., description="Start offset into the original text.")
    end: int = Field(..., description="End offset (exclusive) into the original text.")
    order: int = Field(..., description="Registration sequence, unique within a workspace.")
    render: Render = Field(..., repr=False, description="Produces the replacement text from the context.")

    @property
    def length(self) -> int:
        return self.end - self.start

    @property
    def is_insertion(self) -> bool:
        return self.start == self.end


class Position(BaseModel):
    model_config = ConfigDict(frozen=True)

    offset: int = Field(..., ge=0)
    line: int = 1
    column: int = 0


class SourceLocation(BaseModel):
    """A start/end pair of positions, as reported by a parser."""

    model_config = ConfigDict(frozen=True)

    start: Position
    end: Position


class _Offset(Protocol):
    offset: int


class Location(Protocol):
    """Anything exposing `start.offset` and `end.offset`."""

    @property
    def start(self) -> _Offset: ...

    @property
    def end(self) -> _Offset: ...
