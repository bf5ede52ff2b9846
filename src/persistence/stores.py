"""
Incredicer - Save Stores

Where save documents live. A store moves JSON-compatible dicts in and out of
storage and knows nothing about the snapshot schema.

FileSaveStore keeps one JSON file on local disk; SupabaseSaveStore keeps one
row per player in the ``save_games`` table.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Protocol

from supabase import Client

from src.persistence.errors import CorruptSaveError, SaveError, SaveWriteError

logger = logging.getLogger(__name__)


class SaveStore(Protocol):
    """Storage backend for a single save slot."""

    def read(self) -> dict[str, Any] | None:
        """Stored document, or None when nothing has been saved."""
        ...

    def write(self, document: dict[str, Any]) -> None:
        """Replace the stored document. Raises SaveWriteError."""
        ...

    def quarantine(self, reason: str) -> str | None:
        """Move the stored document aside so it is never overwritten."""
        ...

    def delete(self) -> None:
        """Remove the stored document if present."""
        ...


# -- Local file ----------------------------------------------------------


class FileSaveStore:
    """Save slot backed by a JSON file.

    Writes go to a temporary file in the same directory which then replaces
    the target, so a crash mid-write leaves the previous save intact.
    """

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)

    def read(self) -> dict[str, Any] | None:
        try:
            text = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except UnicodeDecodeError as exc:
            raise CorruptSaveError(f"Save file {self.path} is not valid UTF-8: {exc}") from exc
        except OSError as exc:
            raise SaveError(f"Could not read save file {self.path}: {exc}") from exc

        try:
            document = json.loads(text)
        except json.JSONDecodeError as exc:
            raise CorruptSaveError(f"Save file {self.path} is not valid JSON: {exc}") from exc

        if not isinstance(document, dict):
            raise CorruptSaveError(f"Save file {self.path} does not hold a JSON object.")
        return document

    def write(self, document: dict[str, Any]) -> None:
        try:
            payload = json.dumps(document, indent=2, sort_keys=True, allow_nan=False)
        except (TypeError, ValueError) as exc:
            raise SaveWriteError(f"Could not serialize save data: {exc}") from exc

        try:
            self._atomic_write(payload)
        except OSError as exc:
            raise SaveWriteError(f"Could not write save file {self.path}: {exc}") from exc

    def quarantine(self, reason: str) -> str | None:
        if not self.path.exists():
            return None

        stamp = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%S%f")
        target = self.path.with_name(f"{self.path.stem}.{reason}-{stamp}{self.path.suffix}")
        try:
            os.replace(self.path, target)
        except OSError as exc:
            raise SaveError(f"Could not move {self.path} aside: {exc}") from exc

        logger.warning("Moved unreadable save %s to %s", self.path, target)
        return str(target)

    def delete(self) -> None:
        try:
            self.path.unlink(missing_ok=True)
        except OSError as exc:
            raise SaveError(f"Could not delete save file {self.path}: {exc}") from exc

    def _atomic_write(self, payload: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(payload)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_name, self.path)
        finally:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)


# -- Supabase ------------------------------------------------------------


class SupabaseSaveStore:
    """Save slot backed by the ``save_games`` table, one row per player."""

    def __init__(
        self,
        client: Client,
        player_id: str,
        *,
        table: str = "save_games",
        quarantine_table: str = "corrupt_saves",
    ) -> None:
        self.client = client
        self.player_id = player_id
        self.table = client.table(table)
        self.quarantine_table = client.table(quarantine_table)

    def read(self) -> dict[str, Any] | None:
        row = self._fetch_row()
        if row is None:
            return None

        document = row.get("payload")
        if isinstance(document, str):
            try:
                document = json.loads(document)
            except json.JSONDecodeError as exc:
                raise CorruptSaveError(f"Cloud save for {self.player_id} is not valid JSON.") from exc

        if not isinstance(document, dict):
            raise CorruptSaveError(f"Cloud save for {self.player_id} does not hold an object.")
        return document

    def write(self, document: dict[str, Any]) -> None:
        try:
            (
                self.table
                .upsert({"player_id": self.player_id, "payload": document})
                .execute()
            )
        except Exception as exc:
            raise SaveWriteError(f"Could not upload save for {self.player_id}: {exc}") from exc

    def quarantine(self, reason: str) -> str | None:
        row = self._fetch_row()
        if row is None:
            return None

        try:
            (
                self.quarantine_table
                .insert({
                    "player_id": self.player_id,
                    "payload": row.get("payload"),
                    "reason": reason,
                })
                .execute()
            )
            self.table.delete().eq("player_id", self.player_id).execute()
        except Exception as exc:
            raise SaveError(f"Could not quarantine cloud save for {self.player_id}: {exc}") from exc

        logger.warning("Moved unreadable cloud save for %s to corrupt_saves", self.player_id)
        return self.player_id

    def delete(self) -> None:
        try:
            self.table.delete().eq("player_id", self.player_id).execute()
        except Exception as exc:
            raise SaveError(f"Could not delete cloud save for {self.player_id}: {exc}") from exc

    def _fetch_row(self) -> dict[str, Any] | None:
        try:
            data = (
                self.table
                .select("*")
                .eq("player_id", self.player_id)
                .execute()
            )
        except Exception as exc:
            raise SaveError(f"Could not fetch cloud save for {self.player_id}: {exc}") from exc

        if data.data:
            return data.data[0]
        return None
