"""Error hierarchy shared by the repositories, services, and CLI.

Services raise these; callers (the CLI, view models) catch
:class:`GameZoneError` and show the message inline.
"""

from __future__ import annotations


class GameZoneError(Exception):
    """Base class for all GameZone-specific errors."""


class ConfigError(GameZoneError):
    """Raised when the settings file is missing or invalid."""


class NotFoundError(GameZoneError):
    """Raised when a credential, identity, or record lookup finds nothing."""


class ConflictError(GameZoneError):
    """Raised when a signup collides with an existing email or username."""


class ValidationError(GameZoneError):
    """Raised when input fails a domain rule (e.g. rating out of range)."""


class MalformedTokenError(GameZoneError):
    """Raised when a session token does not decode to a known identity."""


class StorageUnavailableError(GameZoneError):
    """Raised (strict reads only) when the storage medium cannot be read."""


class NotAuthenticatedError(GameZoneError):
    """Raised when an operation needs a signed-in user and there is none."""


class PermissionDeniedError(GameZoneError):
    """Raised when a user tries to change a review they did not write."""
