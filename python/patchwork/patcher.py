from typing import Any, Optional, Union

import structlog

from patchwork.emit import render_to_async_sink, render_to_sink, render_to_string
from patchwork.errors import RangeError
from patchwork.models import Location, Patch, Render
from patchwork.workspace import Workspace, of_string, with_patch

logger = structlog.get_logger(__name__)


def _loc_span(loc: Location) -> tuple[int, int]:
    start = loc.start.offset
    return start, loc.end.offset - start


class Patcher:
    """
    Registers edits against one workspace under construction.

    Each call swaps in a new immutable Workspace; the one returned by
    `workspace` is a snapshot and is not affected by later calls.
    Not safe to share between threads.
    """

    def __init__(self, source: Union[str, Workspace]):
        self._workspace = of_string(source) if isinstance(source, str) else source
        # Resume after any patches the workspace already carries
        self._order = self._workspace.next_order - 1

    @property
    def workspace(self) -> Workspace:
        return self._workspace

    @property
    def original(self) -> str:
        return self._workspace.value

    def patch_with(self, start: int, length: int, render: Render) -> Patch:
        end = start + length
        patch = Patch(start=min(start, end), end=max(start, end), order=self._order + 1, render=render)
        self._workspace = with_patch(self._workspace, patch)
        self._order = patch.order
        logger.debug("Registered patch", order=patch.order, start=patch.start, end=patch.end)
        return patch

    def patch(self, start: int, length: int, text: str) -> Patch:
        return self.patch_with(start, length, lambda _ctx: text)

    def remove(self, start: int, length: int) -> Patch:
        return self.patch(start, length, "")

    def patch_loc_with(self, loc: Location, render: Render) -> Patch:
        return self.patch_with(*_loc_span(loc), render)

    def patch_loc(self, loc: Location, text: str) -> Patch:
        return self.patch(*_loc_span(loc), text)

    def remove_loc(self, loc: Location) -> Patch:
        return self.remove(*_loc_span(loc))

    def read(self, start: int, length: int) -> str:
        """Returns original text in [start, start + length), ignoring every patch."""
        value = self._workspace.value
        end = start + length
        if start < 0 or length < 0 or end > len(value):
            raise RangeError(start, end, len(value))
        return value[start:end]

    def read_loc(self, loc: Location) -> str:
        return self.read(*_loc_span(loc))

    def render_to_string(self, context: Any = None) -> str:
        return render_to_string(self._workspace, context)

    def render_to_sink(self, sink, context: Any = None, encoding: Optional[str] = None) -> int:
        return render_to_sink(sink, self._workspace, context, encoding=encoding)

    async def render_to_async_sink(self, sink, context: Any = None, encoding: Optional[str] = None) -> int:
        return await render_to_async_sink(sink, self._workspace, context, encoding=encoding)
