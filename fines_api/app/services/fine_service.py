"""
Business logic for traffic fines.

``FineService`` works on a single SQLite connection supplied by its
caller.  Every mutation is one SQL statement followed by a commit, so
concurrent requests are serialised by the database itself:

* overdue sweep: unpaid fines issued 30 or more days ago become
  ``overdue`` and grow by 20%.  Runs before list, get and mark-as-paid.
* frequent offender surcharge: a flat 50.0 is added to a new fine when
  the offender already has three or more fines that are not paid.
* early payment discount: paying within 14 days of issue takes 10%
  off the amount.
"""

import logging
import re
import sqlite3
from datetime import date
from typing import Any, Dict, Optional, Tuple

from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from ..schemas.fine import FineCreate, FineRead, FineReplace, FineStatus, FineUpdate

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 50
MAX_LIMIT = 100

OVERDUE_AFTER_DAYS = 30
OVERDUE_PENALTY_RATE = 1.20
EARLY_PAYMENT_DAYS = 14
EARLY_PAYMENT_RATE = 0.90
FREQUENT_OFFENDER_THRESHOLD = 3
FREQUENT_OFFENDER_SURCHARGE = 50.0

UPDATABLE_FIELDS = ("offender_name", "offence_type", "fine_amount", "date_issued", "status")

_LEADING_INT = re.compile(r"\s*[+-]?\d+")


def parse_page_param(value: Optional[str]) -> Optional[int]:
    """Read a pagination query value the lenient way.

    ``None`` (parameter absent) is kept so the default applies.  Anything
    else is read as its leading integer, and a value without one counts
    as 0: ``"12abc"`` is 12, ``""`` and ``"many"`` are 0.
    """
    if value is None:
        return None
    match = _LEADING_INT.match(value)
    return int(match.group()) if match else 0


def clamp_pagination(limit: Optional[int], offset: Optional[int]) -> Tuple[int, int]:
    """Bring ``limit`` into [1, 100] (default 50) and ``offset`` to >= 0."""
    limit = DEFAULT_LIMIT if limit is None else max(1, min(MAX_LIMIT, limit))
    offset = 0 if offset is None else max(0, offset)
    return limit, offset


def _to_db_value(value: Any) -> Any:
    if isinstance(value, FineStatus):
        return value.value
    if isinstance(value, date):
        return value.isoformat()
    return value


class FineService:
    """Service for the ``fines`` table.

    ``today`` pins the date used by the overdue sweep and the early
    payment discount; when omitted the current local date is read on
    every call.
    """

    def __init__(self, conn: sqlite3.Connection, today: Optional[date] = None) -> None:
        self.conn = conn
        self._today = today

    @property
    def today(self) -> date:
        return self._today or date.today()

    async def apply_overdue_penalties(self) -> int:
        """Escalate every eligible fine to ``overdue`` with a 20% penalty.

        Fines that are already ``overdue`` or ``paid`` are left alone, so
        running the sweep repeatedly never compounds the penalty.
        Returns the number of fines escalated.
        """
        cursor = self.conn.execute(
            f"""
            UPDATE fines
            SET status = 'overdue',
                fine_amount = ROUND(fine_amount * {OVERDUE_PENALTY_RATE}, 2)
            WHERE status <> 'paid'
              AND status <> 'overdue'
              AND date_issued <= date(?, '-{OVERDUE_AFTER_DAYS} days')
            """,
            (self.today.isoformat(),),
        )
        self.conn.commit()
        if cursor.rowcount > 0:
            logger.info("Marked %s fine(s) overdue", cursor.rowcount)
        return cursor.rowcount

    async def list_fines(self, limit: Optional[int] = None, offset: Optional[int] = None) -> Dict[str, Any]:
        """Return a page of fines ordered by ``fine_id`` descending.

        The result is a dict with ``items`` plus the effective ``limit``
        and ``offset`` after clamping.
        """
        await self.apply_overdue_penalties()
        limit, offset = clamp_pagination(limit, offset)
        rows = self.conn.execute(
            "SELECT * FROM fines ORDER BY fine_id DESC LIMIT ? OFFSET ?",
            (limit, offset),
        ).fetchall()
        return {"items": [self._row_to_fine(row) for row in rows], "limit": limit, "offset": offset}

    async def get_fine(self, fine_id: int) -> Optional[FineRead]:
        """Retrieve a fine by ID, or ``None`` if it does not exist."""
        await self.apply_overdue_penalties()
        row = self.conn.execute("SELECT * FROM fines WHERE fine_id = ?", (fine_id,)).fetchone()
        if not row:
            return None
        return self._row_to_fine(row)

    async def create_fine(self, data: FineCreate) -> FineRead:
        """Insert a new fine and return the stored record.

        The frequent offender count and the insert happen in the same
        statement.
        """
        row = self._execute_returning(
            f"""
            INSERT INTO fines (offender_name, offence_type, fine_amount, date_issued, status)
            VALUES (
                :offender_name,
                :offence_type,
                ROUND(:fine_amount + CASE
                    WHEN (SELECT COUNT(*) FROM fines
                          WHERE offender_name = :offender_name AND status <> 'paid')
                         >= {FREQUENT_OFFENDER_THRESHOLD}
                    THEN {FREQUENT_OFFENDER_SURCHARGE}
                    ELSE 0
                END, 2),
                :date_issued,
                :status
            )
            RETURNING *
            """,
            {
                "offender_name": data.offender_name,
                "offence_type": data.offence_type,
                "fine_amount": data.fine_amount,
                "date_issued": _to_db_value(data.date_issued),
                "status": _to_db_value(data.status or FineStatus.UNPAID),
            },
        )
        fine = self._row_to_fine(row)
        if fine.fine_amount != round(data.fine_amount, 2):
            logger.info("Frequent offender surcharge applied to %s", data.offender_name)
        logger.info("Created fine %s", fine.fine_id)
        return fine

    async def replace_fine(self, fine_id: int, data: FineReplace) -> Optional[FineRead]:
        """Overwrite every field of a fine.  Returns ``None`` if missing."""
        row = self._execute_returning(
            """
            UPDATE fines
            SET offender_name = ?, offence_type = ?, fine_amount = ?, date_issued = ?, status = ?
            WHERE fine_id = ?
            RETURNING *
            """,
            (
                data.offender_name,
                data.offence_type,
                data.fine_amount,
                _to_db_value(data.date_issued),
                _to_db_value(data.status),
                fine_id,
            ),
        )
        if not row:
            return None
        logger.info("Replaced fine %s", fine_id)
        return self._row_to_fine(row)

    async def update_fine(self, fine_id: int, data: FineUpdate) -> Optional[FineRead]:
        """Update only the fields provided in ``data``.

        Raises ``ValidationError`` when nothing is left to update.
        Returns ``None`` if the fine does not exist.
        """
        fields = {
            name: _to_db_value(value)
            for name, value in data.model_dump(exclude_unset=True).items()
            if name in UPDATABLE_FIELDS and value is not None
        }
        if not fields:
            raise ValidationError("No fields to update")

        # Column names come from UPDATABLE_FIELDS, never from the client.
        assignments = ", ".join(f"{name} = :{name}" for name in fields)
        row = self._execute_returning(
            f"UPDATE fines SET {assignments} WHERE fine_id = :fine_id RETURNING *",
            {**fields, "fine_id": fine_id},
        )
        if not row:
            return None
        logger.info("Updated fine %s (%s)", fine_id, ", ".join(fields))
        return self._row_to_fine(row)

    async def delete_fine(self, fine_id: int) -> bool:
        """Delete a fine.  Returns ``False`` if no row was removed."""
        cursor = self.conn.execute("DELETE FROM fines WHERE fine_id = ?", (fine_id,))
        self.conn.commit()
        if cursor.rowcount == 0:
            return False
        logger.info("Deleted fine %s", fine_id)
        return True

    async def mark_as_paid(self, fine_id: int) -> None:
        """Mark a fine as paid, applying the early payment discount.

        The overdue sweep runs first, so a fine paid late is settled at
        its penalised amount.  Raises ``NotFoundError`` if the fine does
        not exist and ``ConflictError`` if it cannot be paid (normally
        because it already is).
        """
        await self.apply_overdue_penalties()
        row = self._execute_returning(
            f"""
            UPDATE fines
            SET status = 'paid',
                fine_amount = CASE
                    WHEN :today <= date(date_issued, '+{EARLY_PAYMENT_DAYS} days')
                    THEN ROUND(fine_amount * {EARLY_PAYMENT_RATE}, 2)
                    ELSE fine_amount
                END
            WHERE fine_id = :fine_id AND status <> 'paid'
            RETURNING fine_id, fine_amount
            """,
            {"today": self.today.isoformat(), "fine_id": fine_id},
        )
        if row:
            logger.info("Fine %s paid, amount %.2f", fine_id, row["fine_amount"])
            return

        current = self.conn.execute("SELECT status FROM fines WHERE fine_id = ?", (fine_id,)).fetchone()
        if not current:
            raise NotFoundError("Fine not found")
        if current["status"] == FineStatus.PAID.value:
            raise ConflictError("Fine already paid")
        raise ConflictError("Unable to mark as paid")

    @staticmethod
    def _row_to_fine(row: sqlite3.Row) -> FineRead:
        return FineRead(**dict(row))

    def _execute_returning(self, sql: str, params: Any) -> Optional[sqlite3.Row]:
        """Run a ``... RETURNING`` statement, commit, and return its row.

        All rows are fetched before committing so the statement has
        finished when the transaction ends.
        """
        rows = self.conn.execute(sql, params).fetchall()
        self.conn.commit()
        return rows[0] if rows else None
