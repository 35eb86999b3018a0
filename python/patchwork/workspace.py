from typing import Tuple

from pydantic import BaseModel, ConfigDict

from patchwork.errors import RangeError
from patchwork.models import Patch


class Workspace(BaseModel):
    """
    An original string and the patches registered over it.
    Immutable: every new patch yields a new Workspace sharing the same `value`.
    """

    model_config = ConfigDict(frozen=True)

    value: str
    patches: Tuple[Patch, ...] = ()

    @property
    def next_order(self) -> int:
        return max((p.order for p in self.patches), default=0) + 1


def of_string(text: str) -> Workspace:
    return Workspace(value=text)


def with_patch(workspace: Workspace, patch: Patch) -> Workspace:
    """Returns a copy of `workspace` with `patch` appended. The input is left untouched."""
    size = len(workspace.value)
    if not 0 <= patch.start <= patch.end <= size:
        raise RangeError(patch.start, patch.end, size)
    return workspace.model_copy(update={"patches": workspace.patches + (patch,)})
