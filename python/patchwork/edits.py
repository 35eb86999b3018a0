"""
Edit files: a JSON list of positional edits that can be registered on a Patcher.
"""

import json
from pathlib import Path
from typing import Any, List, Mapping, Optional

import structlog
from pydantic import BaseModel, Field, TypeAdapter, model_validator

from patchwork.errors import TemplateError
from patchwork.patcher import Patcher

logger = structlog.get_logger(__name__)


class EditSpec(BaseModel):
    """
    A single edit as written in an edit file.
    Either `length` or `end` locates the range; both absent means an insertion.
    """

    start: int = Field(..., description="Offset where the edit begins.")
    length: Optional[int] = Field(None, description="Number of characters replaced. May be negative.")
    end: Optional[int] = Field(None, description="Exclusive end offset, as an alternative to `length`.")
    text: str = Field("", description="Replacement text. Empty text deletes the range.")
    template: bool = Field(
        False,
        description=(
            "Treat `text` as a str.format template rendered against the context. "
            "'{original}' expands to the original text of the range."
        ),
    )

    @model_validator(mode="after")
    def _check_extent(self):
        if self.length is not None and self.end is not None and self.start + self.length != self.end:
            raise ValueError(f"length {self.length} and end {self.end} disagree for start {self.start}")
        return self

    @property
    def span(self) -> int:
        if self.length is not None:
            return self.length
        if self.end is not None:
            return self.end - self.start
        return 0


_edit_list = TypeAdapter(List[EditSpec])


def parse_edits(raw: str) -> List[EditSpec]:
    return _edit_list.validate_python(json.loads(raw))


def load_edits(path: Path) -> List[EditSpec]:
    with open(path, "r", encoding="utf-8") as f:
        return parse_edits(f.read())


def _template_render(text: str, original: str):
    def render(context: Optional[Mapping[str, Any]]) -> str:
        values = dict(context or {})
        values["original"] = original
        try:
            return text.format_map(values)
        except (KeyError, AttributeError, IndexError, TypeError, ValueError) as e:
            raise TemplateError(f"Cannot render template {text!r}: {type(e).__name__}: {e}") from e

    return render


def register_edits(patcher: Patcher, edits: List[EditSpec]) -> int:
    """Registers every edit on `patcher` in list order. Returns how many were registered."""
    for edit in edits:
        if edit.template:
            start, length = min(edit.start, edit.start + edit.span), abs(edit.span)
            original = patcher.read(start, length)
            patcher.patch_with(edit.start, edit.span, _template_render(edit.text, original))
        else:
            patcher.patch(edit.start, edit.span, edit.text)

    logger.info("Registered edits", count=len(edits))
    return len(edits)
