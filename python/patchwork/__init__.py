from importlib.metadata import PackageNotFoundError, version

from patchwork.emit import render_to_async_sink, render_to_sink, render_to_string
from patchwork.errors import OverlapError, PatchError, RangeError
from patchwork.merge import merge_patches
from patchwork.models import Patch, Position, SourceLocation
from patchwork.patcher import Patcher
from patchwork.workspace import Workspace, of_string, with_patch

try:
    __version__ = version("patchwork-rewrite")
except PackageNotFoundError:
    __version__ = "0.0.0-dev"

__all__ = [
    "Patcher",
    "Patch",
    "Workspace",
    "Position",
    "SourceLocation",
    "of_string",
    "with_patch",
    "merge_patches",
    "render_to_string",
    "render_to_sink",
    "render_to_async_sink",
    "PatchError",
    "OverlapError",
    "RangeError",
    "__version__",
]
