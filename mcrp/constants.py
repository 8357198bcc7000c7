import string


# Manifest file framing
MANIFEST_MAGIC = b"\x00\x00\x00\x00\xfc\xb9\xcf\x9b"  # 8 bytes
MANIFEST_PAYLOAD_OFFSET = 256
MANIFEST_NAME = "contents.json"

MANIFEST_VERSION = 1

# Master key lives next to the archive root: "<output>.key"
KEY_FILE_SUFFIX = ".key"

# AES-256 key; the CFB-8 IV is the first 16 bytes of the same key
KEY_SIZE = 32
IV_SIZE = 16
CFB_SEGMENT_BITS = 8

KEY_ALPHABET = string.ascii_letters + string.digits
