class McrpError(Exception):
    """Base class for mcrp-specific errors."""


# Archive framing / manifest
class BadMagicError(McrpError):
    pass


class MalformedManifestError(McrpError):
    pass


class UnsupportedManifestVersionError(McrpError):
    pass


# Keys
class CipherKeyLengthError(McrpError):
    pass


class MissingKeyFileError(McrpError):
    pass


# Destination handling
class DestinationOverlapError(McrpError):
    pass


class ReservedPathError(McrpError):
    pass
