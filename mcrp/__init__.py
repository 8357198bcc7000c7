"""
mcrp — folder encryption with per-file keys and a detached master key.

An archive is a folder mirroring the source tree:

- every file is either AES-256-CFB8 encrypted with its own random key or copied verbatim
- ``contents.json`` holds the framed, master-key-encrypted manifest of paths and keys
- ``<archive>.key`` (a sibling of the folder) holds the master key

There is no authentication: a wrong key or a damaged file decrypts to garbage.
"""

__version__ = "0.1"

__all__ = [
    "constants",
    "cipher",
    "keygen",
    "manifest",
    "framer",
    "writer",
    "reader",
]

# Programmatic API: mcrp.writer.encrypt_directory / mcrp.reader.decrypt_directory,
# or the CLI functions in mcrp.cli (cmd_encrypt/cmd_decrypt).
