"""
Service layer for savings plans (Sparpläne).

Every operation is scoped to an owner.  Access to a single plan goes
through ``resolve_owned``, which distinguishes three outcomes:

* the plan exists and belongs to the caller (``FOUND``);
* the plan exists but belongs to someone else (``FORBIDDEN``, HTTP 403);
* no plan has this id (``ABSENT``, HTTP 404).

Keeping this decision in one helper guarantees that get, update and
delete apply the same not-found/forbidden policy.
"""

from __future__ import annotations

import enum
import logging
import sqlite3
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from typing import List, Optional

from sparplan_api.app.core.db import get_connection, get_cursor
from sparplan_api.app.core.errors import ApiError, ForbiddenError, InternalError, NotFoundError
from sparplan_api.app.schemas.sparplan import SparplanRead, SparplanWrite


logger = logging.getLogger(__name__)


class Ownership(enum.Enum):
    FOUND = "found"
    FORBIDDEN = "forbidden"
    ABSENT = "absent"


@dataclass(frozen=True)
class OwnershipCheck:
    """Result of ``SparplanService.resolve_owned``; ``plan`` is set only when ``FOUND``."""

    outcome: Ownership
    plan: Optional[SparplanRead] = None

    def error(self) -> Optional[ApiError]:
        """Return the error for a denied outcome, ``None`` when ``FOUND``."""
        if self.outcome is Ownership.ABSENT:
            return NotFoundError("Savings plan not found")
        if self.outcome is Ownership.FORBIDDEN:
            return ForbiddenError("Savings plan belongs to another user")
        return None

    def raise_for_denied(self) -> SparplanRead:
        """Return the plan, or raise the error matching the outcome."""
        error = self.error()
        if error is not None:
            raise error
        return self.plan


class SparplanService:
    """Ownership-scoped CRUD over the ``sparplaene`` table."""

    def __init__(self, db_path: str) -> None:
        self.db_path = db_path

    async def list_for_owner(self, owner_id: int) -> List[SparplanRead]:
        """Return all plans of ``owner_id`` ordered by id; empty if there are none."""
        conn = get_connection(self.db_path)
        try:
            rows = conn.execute(
                "SELECT * FROM sparplaene WHERE user_id = ? ORDER BY id ASC",
                (owner_id,),
            ).fetchall()
            return [self._row_to_sparplan_read(row) for row in rows]
        finally:
            conn.close()

    async def resolve_owned(self, plan_id: int, owner_id: int) -> OwnershipCheck:
        """Classify access of ``owner_id`` to plan ``plan_id``.

        The owner-scoped lookup comes first; only when it misses does
        ``exists`` decide between someone else's plan and no plan at all.
        """
        conn = get_connection(self.db_path)
        try:
            row = conn.execute(
                "SELECT * FROM sparplaene WHERE id = ? AND user_id = ?",
                (plan_id, owner_id),
            ).fetchone()
        finally:
            conn.close()
        if row is not None:
            return OwnershipCheck(Ownership.FOUND, self._row_to_sparplan_read(row))
        if not await self.exists(plan_id):
            return OwnershipCheck(Ownership.ABSENT)
        logger.warning("User %s denied access to savings plan %s", owner_id, plan_id)
        return OwnershipCheck(Ownership.FORBIDDEN)

    async def exists(self, plan_id: int) -> bool:
        """Check whether a plan with this id exists, regardless of owner."""
        conn = get_connection(self.db_path)
        try:
            row = conn.execute("SELECT 1 FROM sparplaene WHERE id = ?", (plan_id,)).fetchone()
            return row is not None
        finally:
            conn.close()

    async def get_owned(self, plan_id: int, owner_id: int) -> SparplanRead:
        """Return the plan if ``owner_id`` owns it.

        Raises ``NotFoundError`` if it does not exist and
        ``ForbiddenError`` if it belongs to another user.
        """
        check = await self.resolve_owned(plan_id, owner_id)
        return check.raise_for_denied()

    async def create(self, data: SparplanWrite, owner_id: int) -> SparplanRead:
        """Insert a plan owned by ``owner_id`` and return it.

        The owner comes from the authenticated identity only.  Raises
        ``NotFoundError`` if that identity no longer maps to a user and
        ``InternalError`` if the store fails.
        """
        created_at = datetime.now(timezone.utc).isoformat()
        try:
            with get_cursor(self.db_path) as cursor:
                owner = cursor.execute("SELECT id FROM users WHERE id = ?", (owner_id,)).fetchone()
                if owner is None:
                    raise NotFoundError("Owner not found")
                cursor.execute(
                    """
                    INSERT INTO sparplaene (user_id, etf_name, monthly_amount, term_years, created_at, updated_at)
                    VALUES (?, ?, ?, ?, ?, ?)
                    """,
                    (owner_id, data.etf_name, str(data.monthly_amount), data.term_years, created_at, created_at),
                )
                plan_id = cursor.lastrowid
                row = cursor.execute("SELECT * FROM sparplaene WHERE id = ?", (plan_id,)).fetchone()
        except sqlite3.Error as exc:
            raise InternalError(f"Storing savings plan failed: {exc}") from exc
        logger.info("User %s created savings plan %s", owner_id, plan_id)
        return self._row_to_sparplan_read(row)

    async def update(self, plan_id: int, data: SparplanWrite, owner_id: int) -> SparplanRead:
        """Overwrite the mutable fields of an owned plan.

        ``id``, owner and ``created_at`` are never touched.  Raises
        ``NotFoundError`` or ``ForbiddenError`` like ``get_owned``, in
        which case nothing is written.
        """
        check = await self.resolve_owned(plan_id, owner_id)
        check.raise_for_denied()
        try:
            with get_cursor(self.db_path) as cursor:
                cursor.execute(
                    """
                    UPDATE sparplaene
                    SET etf_name = ?, monthly_amount = ?, term_years = ?, updated_at = ?
                    WHERE id = ? AND user_id = ?
                    """,
                    (
                        data.etf_name,
                        str(data.monthly_amount),
                        data.term_years,
                        datetime.now(timezone.utc).isoformat(),
                        plan_id,
                        owner_id,
                    ),
                )
                if cursor.rowcount == 0:
                    # deleted between the ownership check and the update
                    raise NotFoundError("Savings plan not found")
                row = cursor.execute("SELECT * FROM sparplaene WHERE id = ?", (plan_id,)).fetchone()
        except sqlite3.Error as exc:
            raise InternalError(f"Updating savings plan {plan_id} failed: {exc}") from exc
        logger.info("User %s updated savings plan %s", owner_id, plan_id)
        return self._row_to_sparplan_read(row)

    async def delete_owned(self, plan_id: int, owner_id: int) -> bool:
        """Delete the plan if it belongs to ``owner_id``.

        Returns ``True`` if a record was deleted, ``False`` otherwise.
        """
        with get_cursor(self.db_path) as cursor:
            cursor.execute(
                "DELETE FROM sparplaene WHERE id = ? AND user_id = ?",
                (plan_id, owner_id),
            )
            deleted = cursor.rowcount > 0
        if deleted:
            logger.info("User %s deleted savings plan %s", owner_id, plan_id)
        return deleted

    async def denial_for(self, plan_id: int, owner_id: int) -> ApiError:
        """Return the error explaining why ``owner_id`` cannot access ``plan_id``.

        Used after ``delete_owned`` returned ``False`` to choose between
        403 and 404 with the same rules as ``resolve_owned``.
        """
        check = await self.resolve_owned(plan_id, owner_id)
        return check.error() or NotFoundError("Savings plan not found")

    @staticmethod
    def _row_to_sparplan_read(row: sqlite3.Row) -> SparplanRead:
        """Convert a database row to a SparplanRead schema instance."""
        return SparplanRead(
            id=row["id"],
            etf_name=row["etf_name"],
            monthly_amount=Decimal(row["monthly_amount"]),
            term_years=row["term_years"],
            created_at=datetime.fromisoformat(row["created_at"]),
        )
