"""
Incredicer - Persistence Errors

Failures the save layer reports to its callers. None of them is fatal: the
game keeps running on in-memory state.
"""


class SaveError(Exception):
    """Base class for save/load failures."""


class SaveWriteError(SaveError):
    """A snapshot could not be serialized or written."""


class CorruptSaveError(SaveError):
    """Stored data exists but cannot be decoded into a snapshot."""


class SaveVersionError(SaveError):
    """Stored data was written by a newer schema than this code supports."""

    def __init__(self, found: int, supported: int) -> None:
        super().__init__(
            f"Save schema version {found} is newer than supported version {supported}."
        )
        self.found = found
        self.supported = supported
