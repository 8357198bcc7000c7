from __future__ import annotations

import argparse
import os
import sys
import time
from pathlib import Path
from typing import List, Optional

from mcrp.errors import McrpError, MissingKeyFileError
from mcrp.manifest import ManifestEntry
from mcrp.pathutil import key_file_path
from mcrp.reader import ArchiveReader, decrypt_directory
from mcrp.writer import encrypt_directory


def _summary(verb: str, entries: List[ManifestEntry], total_bytes: int, t0: float) -> str:
    dt = max(0.000001, time.time() - t0)
    n_enc = sum(1 for e in entries if e.encrypted)
    n_plain = len(entries) - n_enc
    mib = total_bytes / (1024.0 * 1024.0)
    return (
        f"Done: {verb} {len(entries)} files ({n_enc} encrypted, {n_plain} copied); "
        f"{mib:.2f} MiB in {dt:.1f}s; {mib / dt:.2f} MiB/s"
    )


def cmd_encrypt(
    input: str,
    output: str,
    *,
    key: Optional[str] = None,
    exclude: Optional[List[str]] = None,
    jobs: int = 1,
    quiet: bool = False,
) -> bool:
    """Encrypt a folder into an archive folder plus a detached key file.

    Args:
        input: Source folder.
        output: Output archive folder (replaced if it exists).
        key: Master key to use instead of a generated one (32 characters).
        exclude: Source-relative paths to copy without encryption.
        jobs: Parallel workers for per-file encryption.
        quiet: Only print the summary.
    """
    out = Path(output)
    done: List[ManifestEntry] = []
    total = {"bytes": 0}
    t0 = time.time()

    def _progress(entry: ManifestEntry) -> None:
        done.append(entry)
        total["bytes"] += os.path.getsize(out / entry.path)
        if not quiet:
            action = "encrypting" if entry.encrypted else "   copying"
            print(f" {action}: {entry.path}")

    encrypt_directory(input, output, key=key, exclude=exclude or [], jobs=jobs, progress=_progress)
    print(_summary("encrypted", done, total["bytes"], t0))
    print(f"Master key written to: {key_file_path(out)}")
    return True


def cmd_decrypt(input: str, output: str, *, key: Optional[str] = None, jobs: int = 1, quiet: bool = False) -> bool:
    """Decrypt an archive folder produced by ``cmd_encrypt``.

    Args:
        input: Archive folder.
        output: Destination folder (replaced if it exists).
        key: Master key; read from ``<input>.key`` when omitted.
        jobs: Parallel workers for per-file decryption.
        quiet: Only print the summary.
    """
    out = Path(output)
    done: List[ManifestEntry] = []
    total = {"bytes": 0}
    t0 = time.time()

    def _progress(entry: ManifestEntry) -> None:
        done.append(entry)
        total["bytes"] += os.path.getsize(out / entry.path)
        if not quiet:
            action = "decrypting" if entry.encrypted else "   copying"
            print(f" {action}: {entry.path}")

    decrypt_directory(input, output, key=key, jobs=jobs, progress=_progress)
    print(_summary("decrypted", done, total["bytes"], t0))
    return True


def cmd_list(archive: str, *, key: Optional[str] = None) -> bool:
    """List archive entries.

    Args:
        archive: Archive folder.
        key: Master key; read from ``<archive>.key`` when omitted.
    """
    with ArchiveReader(archive, key=key) as r:
        entries = r.list()
    for e in entries:
        kind = "encrypted" if e.encrypted else "plain"
        print(f"{kind}\t{e.path}")
    return True


def cmd_info(archive: str, *, key: Optional[str] = None) -> bool:
    """Show archive information."""
    with ArchiveReader(archive, key=key) as r:
        entries = r.list()
        print(f"Archive: {archive}")
        print(f"  Key file: {key_file_path(archive)}")
        print(f"  Version: {r.manifest.version}")
        print(f"  Entries: {len(entries)}")
        print(f"    Encrypted: {len([e for e in entries if e.encrypted])}")
        print(f"    Plain: {len([e for e in entries if not e.encrypted])}")
    return True


def main(argv: List[str] | None = None):
    ap = argparse.ArgumentParser(
        prog="mcrp",
        description="Encrypt and decrypt folders with per-file keys",
        epilog=(
            "Files are encrypted with AES-256-CFB8 and are NOT authenticated: "
            "a wrong key or a damaged file decrypts to garbage."
        ),
    )
    sub = ap.add_subparsers(dest="cmd", required=True)

    ap_encrypt = sub.add_parser("encrypt", help="Encrypts the folder with a given or auto-generated key")
    ap_encrypt.add_argument("input", help="Input folder")
    ap_encrypt.add_argument("output", help="Output folder")
    ap_encrypt.add_argument("-k", "--key", help="Key used for encryption")
    ap_encrypt.add_argument(
        "-e",
        "--exclude",
        action="append",
        default=[],
        help="Specifies files which should not be encrypted (repeatable)",
    )
    ap_encrypt.add_argument("--jobs", "-j", type=int, default=1, help="Parallel jobs (default 1)")
    ap_encrypt.add_argument("--quiet", help="limit outputs to summaries only", action="store_true")

    ap_decrypt = sub.add_parser("decrypt", help="Decrypts the folder with a given key")
    ap_decrypt.add_argument("input", help="Input folder")
    ap_decrypt.add_argument("output", help="Output folder")
    ap_decrypt.add_argument("-k", "--key", help="Key used for decryption (default: read <input>.key)")
    ap_decrypt.add_argument("--jobs", "-j", type=int, default=1, help="Parallel jobs (default 1)")
    ap_decrypt.add_argument("--quiet", help="limit outputs to summaries only", action="store_true")

    ap_list = sub.add_parser("list", help="List archive contents")
    ap_list.add_argument("archive", help="Archive folder")
    ap_list.add_argument("-k", "--key", help="Archive key")

    ap_info = sub.add_parser("info", help="Show archive information")
    ap_info.add_argument("archive", help="Archive folder")
    ap_info.add_argument("-k", "--key", help="Archive key")

    args = ap.parse_args(argv)
    try:
        if args.cmd == "encrypt":
            cmd_encrypt(args.input, args.output, key=args.key, exclude=args.exclude, jobs=args.jobs, quiet=args.quiet)
        elif args.cmd == "decrypt":
            cmd_decrypt(args.input, args.output, key=args.key, jobs=args.jobs, quiet=args.quiet)
        elif args.cmd == "list":
            cmd_list(args.archive, key=args.key)
        elif args.cmd == "info":
            cmd_info(args.archive, key=args.key)
        else:
            raise RuntimeError("Unknown command")
    except MissingKeyFileError as e:
        print(f"Error: {e}. Provide --key.", file=sys.stderr)
        sys.exit(2)
    except (McrpError, OSError, ValueError, RuntimeError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(2)


if __name__ == "__main__":
    main()
