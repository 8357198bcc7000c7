from __future__ import annotations

import os
import shutil
from pathlib import Path
from typing import Iterator, Tuple, Union

from .constants import KEY_FILE_SUFFIX
from .errors import DestinationOverlapError


def norm_path(p: str) -> str:
    """Normalize archive paths to a canonical forward-slash form.

    Rules:
    - Convert backslashes to slashes
    - Strip leading/trailing slashes
    - Remove empty and '.' segments
    - Reject '..' segments
    """
    p = p.replace("\\", "/").strip("/")
    parts = [q for q in p.split("/") if q not in ("", ".")]
    for q in parts:
        if q == "..":
            raise ValueError("Path may not contain '..'")
    return "/".join(parts)


def iter_source_files(root: Union[str, Path]) -> Iterator[Tuple[str, str]]:
    """Yield ``(archive_path, filesystem_path)`` for every file to archive.

    Directories are visited depth-first in sorted name order. Only regular
    files whose name contains a dot are yielded; extensionless files are
    skipped entirely (neither encrypted nor copied). Symlinked directories
    are not followed.
    """
    root = str(root)

    def _walk(directory: str, prefix: str) -> Iterator[Tuple[str, str]]:
        with os.scandir(directory) as it:
            entries = sorted(it, key=lambda e: e.name)
        for e in entries:
            arc = f"{prefix}/{e.name}" if prefix else e.name
            if e.is_dir(follow_symlinks=False):
                yield from _walk(e.path, arc)
            elif "." in e.name and e.is_file():
                yield arc, e.path

    yield from _walk(root, "")


def key_file_path(archive_root: Union[str, Path]) -> Path:
    """Return the sibling master key path ``<archive_root>.key``.

    The root is resolved first so "." or "out/.." name a real directory.
    """
    p = Path(archive_root).resolve()
    if not p.name:
        raise ValueError(f"Archive root {archive_root} has no name to derive a key file from")
    return p.with_name(p.name + KEY_FILE_SUFFIX)


def _is_within(child: Path, parent: Path) -> bool:
    try:
        child.relative_to(parent)
    except ValueError:
        return False
    return True


def prepare_destination(destination: Union[str, Path], source: Union[str, Path]) -> Path:
    """Remove ``destination`` if present and recreate it empty.

    Refuses to run when the destination and source overlap (either contains
    the other), since the input would be deleted or re-read mid-run.
    """
    dst = Path(destination)
    src_resolved = Path(source).resolve()
    dst_resolved = dst.resolve()
    if _is_within(src_resolved, dst_resolved) or _is_within(dst_resolved, src_resolved):
        raise DestinationOverlapError(f"Destination {dst} overlaps source {source}")
    if dst.is_symlink() or dst.is_file():
        dst.unlink()
    elif dst.exists():
        shutil.rmtree(dst)
    dst.mkdir(parents=True)
    return dst
