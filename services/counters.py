"""Counter service: the sequence allocator for expense and income IDs.

IDs are not generated by SQLite. Each record kind has a row in ``counters``
whose ``seq`` is the next ID to hand out. A batch of ``count`` records takes
the IDs ``[seq, seq + count - 1]`` and moves ``seq`` to ``seq + count + 1``:
one ID is skipped after every batch. Stored data already follows that
numbering, so the gap is kept.

The increment happens in a single ``UPDATE ... RETURNING`` statement, and the
caller's write transaction keeps the counter row locked until its records
are inserted, so two imports of the same kind can never get the same IDs.
"""

import sqlite3
from typing import List, Optional

from errors import PersistenceError
from logger import get_logger
from models.ledger import COUNTER_KINDS, Counter

logger = get_logger()

# IDs skipped after every allocated batch
_BATCH_GAP = 1


class CounterService:
    """Service for allocating blocks of record IDs."""

    def __init__(self, db_manager):
        """Initialize the counter service.

        Args:
            db_manager: Database manager instance for database operations.
        """
        self.db_manager = db_manager

    def allocate(self, kind: str, count: int) -> int:
        """Reserve ``count`` consecutive IDs for ``kind`` and commit.

        Args:
            kind: Record kind, "Expenses" or "Incomes".
            count: Number of IDs needed (> 0).

        Returns:
            The first reserved ID.

        Raises:
            ValueError: If kind is unknown or count is not positive.
            PersistenceError: If the counter cannot be read or written.
        """
        _check_request(kind, count)

        try:
            with self.db_manager.connect() as conn:
                try:
                    self.db_manager.begin_immediate(conn)
                    start_id = self.allocate_in(conn, kind, count)
                    conn.commit()
                except sqlite3.Error:
                    conn.rollback()
                    raise
        except sqlite3.Error as e:
            raise PersistenceError(f"Failed to allocate {kind} IDs: {e}")
        return start_id

    def allocate_in(self, conn: sqlite3.Connection, kind: str, count: int) -> int:
        """Reserve IDs inside the caller's transaction without committing.

        The caller commits once the records using the IDs are written, or
        rolls back to release them.

        Raises:
            ValueError: If kind is unknown or count is not positive.
            sqlite3.Error: Left to the caller, who owns the transaction.
        """
        _check_request(kind, count)

        # First record of a new kind gets id 0
        conn.execute(
            "INSERT INTO counters (kind, seq) VALUES (?, 0) ON CONFLICT (kind) DO NOTHING",
            (kind,),
        )
        cursor = conn.execute(
            "UPDATE counters SET seq = seq + ? WHERE kind = ? RETURNING seq",
            (count + _BATCH_GAP, kind),
        )
        new_seq = cursor.fetchone()[0]
        cursor.close()

        start_id = new_seq - count - _BATCH_GAP
        logger.debug(
            f"Allocated {kind} IDs {start_id}..{start_id + count - 1} (next seq {new_seq})"
        )
        return start_id

    def find(self, kind: str) -> Optional[Counter]:
        """Get the counter for a kind.

        Returns:
            Counter object if the kind has allocated IDs before, None otherwise.
        """
        try:
            with self.db_manager.connect() as conn:
                row = conn.execute(
                    "SELECT kind, seq FROM counters WHERE kind = ?", (kind,)
                ).fetchone()
        except sqlite3.Error as e:
            raise PersistenceError(f"Failed to read {kind} counter: {e}")

        if row:
            return Counter(kind=row[0], seq=row[1])
        return None

    def find_all(self) -> List[Counter]:
        """Get all counters, ordered by kind."""
        try:
            with self.db_manager.connect() as conn:
                rows = conn.execute(
                    "SELECT kind, seq FROM counters ORDER BY kind"
                ).fetchall()
        except sqlite3.Error as e:
            raise PersistenceError(f"Failed to read counters: {e}")

        return [Counter(kind=row[0], seq=row[1]) for row in rows]


def _check_request(kind: str, count: int) -> None:
    if kind not in COUNTER_KINDS:
        raise ValueError(f"Unknown counter kind: {kind}")
    if isinstance(count, bool) or not isinstance(count, int) or count <= 0:
        raise ValueError(f"count must be a positive integer, got {count!r}")
