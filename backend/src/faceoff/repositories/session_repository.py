"""DuckDB-backed storage for the roster and the current session."""

import logging
import threading
from pathlib import Path
from typing import Mapping

import duckdb

from faceoff.models.participant import Participant, Position, RosterEntry, Team

logger = logging.getLogger(__name__)

SCHEMA = """
    CREATE SEQUENCE IF NOT EXISTS roster_id_seq START 1;
    CREATE SEQUENCE IF NOT EXISTS session_signups_id_seq START 1;

    CREATE TABLE IF NOT EXISTS roster (
        id INTEGER DEFAULT nextval('roster_id_seq'),
        name VARCHAR NOT NULL,
        position VARCHAR NOT NULL  -- 'forward', 'defense', 'goalie'
    );

    CREATE TABLE IF NOT EXISTS session_signups (
        id INTEGER DEFAULT nextval('session_signups_id_seq'),
        name VARCHAR NOT NULL,
        position VARCHAR NOT NULL,
        team VARCHAR NOT NULL DEFAULT 'unassigned'  -- 'red', 'blue', 'unassigned'
    );
"""


class SessionRepository:
    """Data access layer for roster entries and session signups.

    Holds a single connection. Callers that need check-then-write atomicity
    (the signup registry) serialize access themselves; the internal lock
    only protects the connection from concurrent use across threads.
    """

    def __init__(self, database_path: str | Path = ":memory:"):
        """Open (or create) the database and ensure the schema exists.

        Args:
            database_path: Path to the .duckdb file, or ":memory:"
        """
        self._db_path = str(database_path)
        if self._db_path != ":memory:":
            Path(self._db_path).parent.mkdir(parents=True, exist_ok=True)

        self._conn = duckdb.connect(self._db_path)
        self._lock = threading.Lock()
        for statement in SCHEMA.split(";"):
            if statement.strip():
                self._conn.execute(statement)
        logger.info(f"SessionRepository: Using {self._db_path}")

    def close(self) -> None:
        self._conn.close()

    # Roster

    def list_roster(self) -> list[RosterEntry]:
        """All roster entries, alphabetical by name."""
        with self._lock:
            rows = self._conn.execute(
                "SELECT id, name, position FROM roster ORDER BY name ASC, id ASC"
            ).fetchall()
        return [RosterEntry(id=r[0], name=r[1], position=Position(r[2])) for r in rows]

    def add_roster_entry(self, name: str, position: Position) -> RosterEntry:
        with self._lock:
            row = self._conn.execute(
                "INSERT INTO roster (name, position) VALUES (?, ?) RETURNING id",
                [name, position.value],
            ).fetchone()
        return RosterEntry(id=row[0], name=name, position=position)

    # Session

    def list_participants(self) -> list[Participant]:
        """Current session participants in signup order."""
        with self._lock:
            rows = self._conn.execute(
                "SELECT id, name, position, team FROM session_signups ORDER BY id ASC"
            ).fetchall()
        return [
            Participant(id=r[0], name=r[1], position=Position(r[2]), team=Team(r[3]))
            for r in rows
        ]

    def get_participant(self, participant_id: int) -> Participant | None:
        with self._lock:
            row = self._conn.execute(
                "SELECT id, name, position, team FROM session_signups WHERE id = ?",
                [participant_id],
            ).fetchone()
        if row is None:
            return None
        return Participant(id=row[0], name=row[1], position=Position(row[2]), team=Team(row[3]))

    def find_participant_by_name(self, name: str) -> Participant | None:
        with self._lock:
            row = self._conn.execute(
                "SELECT id, name, position, team FROM session_signups WHERE name = ?",
                [name],
            ).fetchone()
        if row is None:
            return None
        return Participant(id=row[0], name=row[1], position=Position(row[2]), team=Team(row[3]))

    def count_participants(self) -> int:
        with self._lock:
            return self._conn.execute("SELECT COUNT(*) FROM session_signups").fetchone()[0]

    def insert_participant(self, name: str, position: Position) -> Participant:
        with self._lock:
            row = self._conn.execute(
                "INSERT INTO session_signups (name, position, team) VALUES (?, ?, ?) RETURNING id",
                [name, position.value, Team.UNASSIGNED.value],
            ).fetchone()
        return Participant(id=row[0], name=name, position=position)

    def delete_participant(self, participant_id: int) -> bool:
        """Delete a participant. Returns False if the id was not present."""
        with self._lock:
            deleted = self._conn.execute(
                "DELETE FROM session_signups WHERE id = ? RETURNING id",
                [participant_id],
            ).fetchall()
        return bool(deleted)

    def set_team(self, participant_id: int, team: Team) -> None:
        with self._lock:
            self._conn.execute(
                "UPDATE session_signups SET team = ? WHERE id = ?",
                [team.value, participant_id],
            )

    def apply_assignment(self, assignment: Mapping[int, Team]) -> None:
        """Write a full team assignment in one transaction.

        Readers never observe a half-applied split; on failure nothing is
        written and the error propagates.
        """
        rows = [[team.value, participant_id] for participant_id, team in assignment.items()]
        with self._lock:
            self._conn.begin()
            try:
                if rows:
                    self._conn.executemany(
                        "UPDATE session_signups SET team = ? WHERE id = ?", rows
                    )
                self._conn.commit()
            except Exception:
                self._conn.rollback()
                raise

    def clear_session(self) -> int:
        """Remove every signup. Returns the number of rows removed."""
        with self._lock:
            removed = self._conn.execute(
                "DELETE FROM session_signups RETURNING id"
            ).fetchall()
        return len(removed)
