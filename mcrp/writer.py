from __future__ import annotations

import concurrent.futures as _fut
import shutil
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Union

from .cipher import check_key, encrypt_in_place
from .constants import MANIFEST_NAME, MANIFEST_VERSION
from .errors import ReservedPathError
from .framer import write_manifest_file
from .keygen import generate_key
from .manifest import Manifest, ManifestEntry, encode_manifest
from .pathutil import iter_source_files, key_file_path, norm_path, prepare_destination


class ArchiveWriter:
    """Build an archive directory one file at a time.

    The output directory must already exist (see ``prepare_destination``).
    Entries are recorded in the order they are added; ``finalize`` writes the
    encrypted manifest into the output and the master key next to it.
    """

    def __init__(self, output: Union[str, Path], key: Optional[str] = None):
        self.output = Path(output)
        if key is not None:
            self.master_key = check_key(key.encode("utf-8"))
        else:
            self.master_key = generate_key().encode("ascii")
        self.key_path = key_file_path(self.output)
        self.entries: List[ManifestEntry] = []
        self._finalized = False

    def __enter__(self) -> "ArchiveWriter":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is None and not self._finalized:
            self.finalize()

    def _target(self, arc: str) -> Path:
        dst = self.output / arc
        dst.parent.mkdir(parents=True, exist_ok=True)
        return dst

    def store_entry(self, arc: str, src: str, *, encrypt: bool = True) -> ManifestEntry:
        """Write one file into the archive and return its manifest entry.

        Does not record the entry; safe to call from worker threads.
        """
        arc = norm_path(arc)
        if arc == MANIFEST_NAME:
            raise ReservedPathError(f"{arc} is reserved for the archive manifest")
        dst = self._target(arc)
        if not encrypt:
            shutil.copyfile(src, dst)
            return ManifestEntry(path=arc, key=None)
        with open(src, "rb") as fh:
            buf = bytearray(fh.read())
        file_key = generate_key()
        encrypt_in_place(buf, file_key.encode("ascii"))
        with open(dst, "wb") as fh:
            fh.write(buf)
        return ManifestEntry(path=arc, key=file_key)

    def add_file(self, arc: str, src: str) -> ManifestEntry:
        entry = self.store_entry(arc, src, encrypt=True)
        self.entries.append(entry)
        return entry

    def add_excluded(self, arc: str, src: str) -> ManifestEntry:
        entry = self.store_entry(arc, src, encrypt=False)
        self.entries.append(entry)
        return entry

    def manifest(self) -> Manifest:
        return Manifest(version=MANIFEST_VERSION, content=list(self.entries))

    def finalize(self) -> Path:
        """Write ``contents.json`` and ``<output>.key``; return the key file path."""
        payload = bytearray(encode_manifest(self.manifest()))
        encrypt_in_place(payload, self.master_key)
        write_manifest_file(self.output / MANIFEST_NAME, bytes(payload))
        key_path = self.key_path
        with open(key_path, "wb") as fh:
            fh.write(self.master_key)
        self._finalized = True
        return key_path


def encrypt_directory(
    source: Union[str, Path],
    destination: Union[str, Path],
    *,
    key: Optional[str] = None,
    exclude: Iterable[str] = (),
    jobs: int = 1,
    progress: Optional[Callable[[ManifestEntry], None]] = None,
) -> Manifest:
    """Encrypt every matching file under ``source`` into ``destination``.

    Args:
        source: Root of the plain tree.
        destination: Archive root; destroyed and recreated if it exists.
        key: Master key (32 characters). A fresh one is generated if omitted.
        exclude: Source-relative paths copied verbatim instead of encrypted.
        jobs: Worker threads for per-file work; the manifest keeps traversal order.
        progress: Called with each entry once it has been written.

    Returns:
        The manifest that was written.

    Raises:
        ReservedPathError: If the source root holds a file named like the manifest;
            checked before the destination is touched.
    """
    excluded = {norm_path(p) for p in exclude}
    writer = ArchiveWriter(destination, key=key)
    files = list(iter_source_files(source))
    if any(arc == MANIFEST_NAME for arc, _full in files):
        raise ReservedPathError(f"Source contains {MANIFEST_NAME}, which is reserved for the archive manifest")
    prepare_destination(destination, source)

    def _store(item) -> ManifestEntry:
        arc, full = item
        return writer.store_entry(arc, full, encrypt=arc not in excluded)

    if jobs > 1 and len(files) > 1:
        with _fut.ThreadPoolExecutor(max_workers=jobs) as ex:
            for entry in ex.map(_store, files):
                writer.entries.append(entry)
                if progress is not None:
                    progress(entry)
    else:
        for item in files:
            entry = _store(item)
            writer.entries.append(entry)
            if progress is not None:
                progress(entry)

    writer.finalize()
    return writer.manifest()
