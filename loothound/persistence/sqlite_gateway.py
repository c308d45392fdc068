"""SQLite-backed persistence gateway for profiles, snapshots and items."""

import asyncio
import sqlite3
import threading
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional, Sequence

import structlog

from ..data.models import Item, Profile, Snapshot
from ..errors import PersistenceError, ValidationError
from .base import PersistenceGateway

SCHEMA = (
    """
    CREATE TABLE IF NOT EXISTS profiles (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        name TEXT NOT NULL,
        league TEXT,
        created_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS profile_stashes (
        profile_id INTEGER NOT NULL REFERENCES profiles(id) ON DELETE CASCADE,
        stash_id TEXT NOT NULL,
        position INTEGER NOT NULL,
        PRIMARY KEY (profile_id, stash_id)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS snapshots (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        profile_id INTEGER NOT NULL REFERENCES profiles(id) ON DELETE CASCADE,
        pricing_revision INTEGER NOT NULL,
        created_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS items (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        snapshot_id INTEGER NOT NULL REFERENCES snapshots(id) ON DELETE CASCADE,
        stash_id TEXT NOT NULL,
        item_id TEXT,
        verified INTEGER NOT NULL,
        w INTEGER NOT NULL,
        h INTEGER NOT NULL,
        icon TEXT,
        name TEXT NOT NULL,
        type_line TEXT NOT NULL,
        base_type TEXT NOT NULL,
        identified INTEGER NOT NULL,
        frame_type INTEGER NOT NULL,
        stack_size INTEGER
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_snapshots_profile_id ON snapshots(profile_id)",
    "CREATE INDEX IF NOT EXISTS idx_items_snapshot_stash ON items(snapshot_id, stash_id)",
)


class SqliteGateway(PersistenceGateway):
    """SQLite implementation of the persistence gateway."""

    def __init__(self, db_path: str = "loothound.db", pricing_revision: int = 1,
                 timeout: float = 30.0):
        self.db_path = Path(db_path)
        self.pricing_revision = pricing_revision
        self.timeout = timeout
        self.logger = structlog.get_logger("loothound.persistence")
        self._lock = threading.Lock()

        self._init_database()

    def _init_database(self) -> None:
        """Initialize database schema."""
        with self._get_connection("init_schema", str(self.db_path)) as conn:
            for statement in SCHEMA:
                conn.execute(statement)
            conn.commit()

    @contextmanager
    def _get_connection(self, operation: str, target: Optional[str] = None):
        """Get a database connection, converting sqlite failures to PersistenceError."""
        conn = None
        try:
            conn = sqlite3.connect(self.db_path, timeout=self.timeout)
            conn.row_factory = sqlite3.Row
            conn.execute("PRAGMA foreign_keys = ON")
            yield conn
        except sqlite3.Error as e:
            if conn:
                conn.rollback()
            self.logger.error("Database error", operation=operation, target=target, error=str(e))
            raise PersistenceError(
                f"{operation} failed: {e}",
                operation=operation,
                target=target,
            ) from e
        finally:
            if conn:
                conn.close()

    async def _run(self, func, *args):
        """Run a blocking database call off the event loop, one at a time."""
        def locked():
            with self._lock:
                return func(*args)
        return await asyncio.to_thread(locked)

    @staticmethod
    def _now() -> str:
        return datetime.now(timezone.utc).isoformat()

    # Profiles

    @staticmethod
    def _profile_fields(payload: dict[str, Any], require_name: bool) -> dict[str, Any]:
        name = payload.get("name")
        if require_name and (not isinstance(name, str) or not name.strip()):
            raise ValidationError("Profile name is required", field="name")

        stashes = payload.get("stashes")
        if stashes is not None:
            stashes = list(dict.fromkeys(str(stash_id) for stash_id in stashes))

        return {"name": name, "league": payload.get("league"), "stashes": stashes}

    def _create_profile(self, payload: dict[str, Any]) -> int:
        fields = self._profile_fields(payload, require_name=True)

        with self._get_connection("create_profile", fields["name"]) as conn:
            cursor = conn.execute(
                "INSERT INTO profiles (name, league, created_at) VALUES (?, ?, ?)",
                (fields["name"], fields["league"], self._now())
            )
            profile_id = cursor.lastrowid
            self._write_stashes(conn, profile_id, fields["stashes"] or [])
            conn.commit()

        self.logger.info("Profile created", profile_id=profile_id, name=fields["name"])
        return profile_id

    def _update_profile(self, profile_id: int, payload: dict[str, Any]) -> None:
        fields = self._profile_fields(payload, require_name=False)

        with self._get_connection("update_profile", str(profile_id)) as conn:
            row = conn.execute("SELECT id FROM profiles WHERE id = ?", (profile_id,)).fetchone()
            if row is None:
                raise PersistenceError(
                    f"Profile {profile_id} does not exist",
                    operation="update_profile",
                    target=str(profile_id),
                )

            if fields["name"] is not None:
                conn.execute("UPDATE profiles SET name = ? WHERE id = ?", (fields["name"], profile_id))
            if "league" in payload:
                conn.execute("UPDATE profiles SET league = ? WHERE id = ?", (fields["league"], profile_id))
            if fields["stashes"] is not None:
                conn.execute("DELETE FROM profile_stashes WHERE profile_id = ?", (profile_id,))
                self._write_stashes(conn, profile_id, fields["stashes"])
            conn.commit()

        self.logger.info("Profile updated", profile_id=profile_id)

    def _delete_profile(self, profile_id: int) -> None:
        with self._get_connection("delete_profile", str(profile_id)) as conn:
            conn.execute("DELETE FROM profiles WHERE id = ?", (profile_id,))
            conn.commit()

        self.logger.info("Profile deleted", profile_id=profile_id)

    @staticmethod
    def _write_stashes(conn: sqlite3.Connection, profile_id: int, stashes: list[str]) -> None:
        conn.executemany(
            "INSERT INTO profile_stashes (profile_id, stash_id, position) VALUES (?, ?, ?)",
            [(profile_id, stash_id, position) for position, stash_id in enumerate(stashes)]
        )

    def _load_profiles(self, profile_id: Optional[int] = None) -> list[Profile]:
        with self._get_connection("list_profiles", None if profile_id is None else str(profile_id)) as conn:
            if profile_id is None:
                rows = conn.execute("SELECT * FROM profiles ORDER BY id").fetchall()
            else:
                rows = conn.execute("SELECT * FROM profiles WHERE id = ?", (profile_id,)).fetchall()

            profiles = []
            for row in rows:
                stash_rows = conn.execute(
                    "SELECT stash_id FROM profile_stashes WHERE profile_id = ? ORDER BY position",
                    (row["id"],)
                ).fetchall()
                profiles.append(Profile(
                    id=row["id"],
                    name=row["name"],
                    stashes=tuple(stash_row["stash_id"] for stash_row in stash_rows),
                    league=row["league"],
                    created_at=row["created_at"],
                ))

            return profiles

    def _get_profile(self, profile_id: int) -> Optional[Profile]:
        profiles = self._load_profiles(profile_id)
        return profiles[0] if profiles else None

    # Snapshots

    def _create_snapshot(self, profile_id: int) -> int:
        with self._get_connection("create_snapshot", str(profile_id)) as conn:
            cursor = conn.execute(
                "INSERT INTO snapshots (profile_id, pricing_revision, created_at) VALUES (?, ?, ?)",
                (profile_id, self.pricing_revision, self._now())
            )
            conn.commit()
            snapshot_id = cursor.lastrowid

        self.logger.info("Snapshot created", profile_id=profile_id, snapshot_id=snapshot_id)
        return snapshot_id

    def _attach_items(self, snapshot_id: int, items: Sequence[Item], stash_id: str) -> None:
        with self._get_connection("attach_items", f"{snapshot_id}/{stash_id}") as conn:
            # Re-attaching a stash replaces what an earlier run wrote for it
            conn.execute(
                "DELETE FROM items WHERE snapshot_id = ? AND stash_id = ?",
                (snapshot_id, stash_id)
            )
            conn.executemany(
                """
                INSERT INTO items (
                    snapshot_id, stash_id, item_id, verified, w, h, icon, name,
                    type_line, base_type, identified, frame_type, stack_size
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                [
                    (
                        snapshot_id, stash_id, item.item_id, int(bool(item.verified)),
                        item.w, item.h, item.icon, item.name, item.type_line,
                        item.base_type, int(bool(item.identified)), item.frame_type,
                        item.stack_size,
                    )
                    for item in items
                ]
            )
            conn.commit()

    def _list_snapshots(self, profile_id: int) -> list[Snapshot]:
        with self._get_connection("list_snapshots", str(profile_id)) as conn:
            rows = conn.execute(
                """
                SELECT * FROM snapshots WHERE profile_id = ?
                ORDER BY created_at DESC, id DESC
                """,
                (profile_id,)
            ).fetchall()

            return [
                Snapshot(
                    id=row["id"],
                    profile_id=row["profile_id"],
                    created_at=row["created_at"],
                    pricing_revision=row["pricing_revision"],
                )
                for row in rows
            ]

    def _list_snapshot_items(self, snapshot_id: int) -> list[Item]:
        with self._get_connection("list_snapshot_items", str(snapshot_id)) as conn:
            rows = conn.execute(
                "SELECT * FROM items WHERE snapshot_id = ? ORDER BY id",
                (snapshot_id,)
            ).fetchall()

            return [self._row_to_item(row) for row in rows]

    def _row_to_item(self, row: sqlite3.Row) -> Item:
        """Convert database row to Item object."""
        return Item(
            verified=bool(row["verified"]),
            w=row["w"],
            h=row["h"],
            icon=row["icon"],
            name=row["name"],
            type_line=row["type_line"],
            base_type=row["base_type"],
            identified=bool(row["identified"]),
            frame_type=row["frame_type"],
            stash_id=row["stash_id"],
            item_id=row["item_id"],
            stack_size=row["stack_size"],
        )

    # Gateway contract

    async def create_profile(self, payload: dict[str, Any]) -> int:
        return await self._run(self._create_profile, payload)

    async def update_profile(self, profile_id: int, payload: dict[str, Any]) -> None:
        await self._run(self._update_profile, profile_id, payload)

    async def delete_profile(self, profile_id: int) -> None:
        await self._run(self._delete_profile, profile_id)

    async def list_profiles(self) -> list[Profile]:
        return await self._run(self._load_profiles)

    async def get_profile(self, profile_id: int) -> Optional[Profile]:
        return await self._run(self._get_profile, profile_id)

    async def create_snapshot(self, profile_id: int) -> int:
        return await self._run(self._create_snapshot, profile_id)

    async def attach_items(self, snapshot_id: int, items: Sequence[Item], stash_id: str) -> None:
        await self._run(self._attach_items, snapshot_id, list(items), stash_id)

    async def list_snapshots(self, profile_id: int) -> list[Snapshot]:
        return await self._run(self._list_snapshots, profile_id)

    async def list_snapshot_items(self, snapshot_id: int) -> list[Item]:
        return await self._run(self._list_snapshot_items, snapshot_id)
