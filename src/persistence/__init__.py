"""
Incredicer Persistence Layer.

Versioned save snapshots, local and cloud save stores, and autosave.
"""

from src.persistence.autosave import AutosaveScheduler
from src.persistence.codec import decode_snapshot, encode_snapshot, migrate_document
from src.persistence.errors import (
    CorruptSaveError,
    SaveError,
    SaveVersionError,
    SaveWriteError,
)
from src.persistence.gateway import PersistenceGateway
from src.persistence.models import SAVE_VERSION, BalanceModel, PrestigeModel, SaveSnapshot
from src.persistence.stores import FileSaveStore, SaveStore, SupabaseSaveStore

__all__ = [
    "AutosaveScheduler",
    "BalanceModel",
    "CorruptSaveError",
    "FileSaveStore",
    "PersistenceGateway",
    "PrestigeModel",
    "SAVE_VERSION",
    "SaveError",
    "SaveSnapshot",
    "SaveStore",
    "SaveVersionError",
    "SaveWriteError",
    "SupabaseSaveStore",
    "decode_snapshot",
    "encode_snapshot",
    "migrate_document",
]
