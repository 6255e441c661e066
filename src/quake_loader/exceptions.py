"""
Error types raised while loading PAK archives and BSP maps.

All of them derive from ``ValueError`` so existing callers that treat an
invalid map as a ``ValueError`` keep working.
"""


class AssetError(ValueError):
    """Base class for asset loading failures."""


class FormatError(AssetError):
    """The data does not follow the expected container layout."""


class VersionError(FormatError):
    """The BSP header reports a version this loader does not read."""


class TruncatedError(AssetError):
    """Fewer bytes are available than a header or lump declares."""


class NotFoundError(AssetError, LookupError):
    """A named archive entry or entity does not exist."""
