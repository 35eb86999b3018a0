import inspect
from typing import Any, Iterator, List, Optional, Union

import structlog

from patchwork.merge import merge_patches
from patchwork.workspace import Workspace

logger = structlog.get_logger(__name__)

Chunk = Union[str, bytes]


def _iter_chunks(workspace: Workspace, context: Any) -> Iterator[str]:
    """
    Walks the original text and the merged patches, yielding unmodified spans
    and rendered replacements in offset order. Empty spans are skipped.
    """
    patches = merge_patches(workspace.patches)
    value = workspace.value
    logger.debug("Emitting workspace", registered=len(workspace.patches), applied=len(patches))

    cursor = 0
    for patch in patches:
        if patch.start > cursor:
            yield value[cursor : patch.start]
        rendered = patch.render(context)
        if rendered:
            yield rendered
        cursor = patch.end

    if cursor < len(value):
        yield value[cursor:]


def _encode(chunk: str, encoding: Optional[str]) -> Chunk:
    return chunk.encode(encoding) if encoding else chunk


def render_to_string(workspace: Workspace, context: Any = None) -> str:
    """Applies every surviving patch and returns the rewritten text."""
    parts: List[str] = list(_iter_chunks(workspace, context))
    return "".join(parts)


def render_to_sink(sink, workspace: Workspace, context: Any = None, encoding: Optional[str] = None) -> int:
    """
    Streams the rewritten text to `sink` (anything with a blocking `write`).
    Pass `encoding` when the sink expects bytes.

    Returns the number of writes issued. Errors raised by the sink abort
    emission as-is; whatever was already written stays written.
    """
    writes = 0
    for chunk in _iter_chunks(workspace, context):
        sink.write(_encode(chunk, encoding))
        writes += 1
    return writes


async def render_to_async_sink(
    sink, workspace: Workspace, context: Any = None, encoding: Optional[str] = None
) -> int:
    """
    Same as `render_to_sink` for asynchronous sinks.

    `sink.write` may return an awaitable (awaited before the next write) or,
    like asyncio's StreamWriter, buffer synchronously and expose `drain()`,
    which is awaited after every write.
    """
    drain = getattr(sink, "drain", None)
    writes = 0
    for chunk in _iter_chunks(workspace, context):
        result = sink.write(_encode(chunk, encoding))
        if inspect.isawaitable(result):
            await result
        if drain is not None:
            await drain()
        writes += 1
    return writes
