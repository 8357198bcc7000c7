from __future__ import annotations

import concurrent.futures as _fut
import shutil
from pathlib import Path
from typing import Callable, List, Optional, Union

from .cipher import check_key, decrypt_in_place
from .constants import MANIFEST_NAME, MANIFEST_VERSION
from .errors import MissingKeyFileError, UnsupportedManifestVersionError
from .framer import read_manifest_file
from .manifest import Manifest, ManifestEntry, decode_manifest
from .pathutil import key_file_path, prepare_destination


def resolve_master_key(archive_root: Union[str, Path], key: Optional[str] = None) -> bytes:
    """Return the master key bytes, from ``key`` or from ``<archive_root>.key``."""
    if key is not None:
        return check_key(key.encode("utf-8"))
    path = key_file_path(archive_root)
    try:
        with open(path, "rb") as fh:
            raw = fh.read()
    except FileNotFoundError as exc:
        raise MissingKeyFileError(f"Master key file not found: {path}") from exc
    return check_key(raw.rstrip(b"\r\n"))


class ArchiveReader:
    def __init__(self, path: Union[str, Path], key: Optional[str] = None):
        self.path = Path(path)
        self.key = key
        self.manifest: Optional[Manifest] = None

    def __enter__(self) -> "ArchiveReader":
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def open(self) -> None:
        if self.manifest is not None:
            return
        # Header is checked before the key is looked up or anything is decrypted
        payload = read_manifest_file(self.path / MANIFEST_NAME)
        master_key = resolve_master_key(self.path, self.key)
        decrypt_in_place(payload, master_key)
        manifest = decode_manifest(payload)
        if manifest.version != MANIFEST_VERSION:
            raise UnsupportedManifestVersionError(
                f"Manifest version {manifest.version} is not supported (expected {MANIFEST_VERSION})"
            )
        self.manifest = manifest

    def close(self) -> None:
        self.manifest = None

    def list(self) -> List[ManifestEntry]:
        self.open()
        assert self.manifest is not None
        return list(self.manifest.content)

    def extract(self, entry: ManifestEntry, dst: Union[str, Path]) -> None:
        """Restore one entry to ``dst``, decrypting it when the entry has a key."""
        src = self.path / entry.path
        dst = Path(dst)
        dst.parent.mkdir(parents=True, exist_ok=True)
        if entry.key is None:
            shutil.copyfile(src, dst)
            return
        with open(src, "rb") as fh:
            buf = bytearray(fh.read())
        decrypt_in_place(buf, entry.key.encode("utf-8"))
        with open(dst, "wb") as fh:
            fh.write(buf)


def decrypt_directory(
    source: Union[str, Path],
    destination: Union[str, Path],
    *,
    key: Optional[str] = None,
    jobs: int = 1,
    progress: Optional[Callable[[ManifestEntry], None]] = None,
) -> Manifest:
    """Restore the archive at ``source`` into ``destination``.

    The destination is destroyed and recreated before the manifest is read,
    so a failed run (bad magic, wrong key) leaves it empty.
    """
    if key is not None:
        check_key(key.encode("utf-8"))
    out = prepare_destination(destination, source)

    with ArchiveReader(source, key=key) as r:
        entries = r.list()

        def _extract(entry: ManifestEntry) -> ManifestEntry:
            r.extract(entry, out / entry.path)
            return entry

        if jobs > 1 and len(entries) > 1:
            with _fut.ThreadPoolExecutor(max_workers=jobs) as ex:
                for entry in ex.map(_extract, entries):
                    if progress is not None:
                        progress(entry)
        else:
            for entry in entries:
                _extract(entry)
                if progress is not None:
                    progress(entry)
        return Manifest(version=MANIFEST_VERSION, content=entries)
