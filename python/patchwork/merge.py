"""
Folds the registered patches of a workspace into a conflict-free sequence,
ascending by offset, ready to be emitted.
"""

from typing import Iterable, List, Optional, Tuple

import structlog

from patchwork.errors import OverlapError
from patchwork.models import Patch

logger = structlog.get_logger(__name__)


def sort_key(patch: Patch) -> Tuple[int, int, int, int]:
    """
    Orders patches so that, scanning left to right, a patch that wraps a region
    is seen before anything nested inside it:
    - lower start first
    - same start: zero-length patches first
    - same start, both non-empty: longer first
    - everything else: registration order
    """
    if patch.is_insertion:
        return (patch.start, 0, 0, patch.order)
    return (patch.start, 1, -patch.length, patch.order)


def merge_patches(patches: Iterable[Patch]) -> List[Patch]:
    """
    Sorts `patches` and drops those fully contained in an already kept replacement.

    Raises:
        OverlapError: two replacements partially overlap.
    """
    kept: List[Patch] = []
    last: Optional[Patch] = None

    for patch in sorted(patches, key=sort_key):
        if last is not None and patch.start < last.end:
            # Insertions sort ahead of a replacement sharing their start, so here they sit strictly inside it
            if patch.is_insertion:
                logger.info("Dropping insertion inside replacement", patch=_span(patch), outer=_span(last))
                continue
            if patch.end <= last.end:
                logger.debug("Dropping contained patch", patch=_span(patch), outer=_span(last))
                continue
            raise OverlapError(last, patch)

        kept.append(patch)
        if not patch.is_insertion:
            last = patch

    return kept


def describe_patches(patches: Iterable[Patch]) -> List[str]:
    return [f"{p.order}: {p.start} {p.end}" for p in patches]


def _span(patch: Patch) -> str:
    return f"{patch.order}@[{patch.start}, {patch.end})"
