from datetime import datetime

from sqlalchemy import insert, select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError

from backend.database import Database, budgets

UPSERT_DIALECTS = {
    "postgresql": pg_insert,
    "sqlite": sqlite_insert,
}


def find_budget(db: Database, user_id: int, month: int, year: int) -> dict | None:
    with db.begin() as conn:
        row = conn.execute(
            select(budgets).where(
                budgets.c.user_id == user_id,
                budgets.c.month == month,
                budgets.c.year == year,
            )
        ).mappings().first()
    return dict(row) if row else None


def upsert_budget(db: Database, user_id: int, month: int, year: int, amount: float) -> dict:
    """Create the budget for a period or overwrite its amount.

    Uses a single ``INSERT ... ON CONFLICT DO UPDATE`` where the dialect has one,
    so concurrent calls for the same period converge on one row.
    """
    now = datetime.now()
    dialect_insert = UPSERT_DIALECTS.get(db.dialect_name)
    if dialect_insert is not None:
        stmt = dialect_insert(budgets).values(
            user_id=user_id,
            month=month,
            year=year,
            amount=amount,
            created_at=now,
            updated_at=now,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["user_id", "month", "year"],
            set_={"amount": amount, "updated_at": now},
        ).returning(budgets)
        with db.begin() as conn:
            row = conn.execute(stmt).mappings().first()
        return dict(row)

    try:
        with db.begin() as conn:
            row = conn.execute(
                insert(budgets)
                .values(user_id=user_id, month=month, year=year, amount=amount)
                .returning(budgets)
            ).mappings().first()
    except IntegrityError:
        with db.begin() as conn:
            row = conn.execute(
                update(budgets)
                .where(
                    budgets.c.user_id == user_id,
                    budgets.c.month == month,
                    budgets.c.year == year,
                )
                .values(amount=amount, updated_at=now)
                .returning(budgets)
            ).mappings().first()
    return dict(row)
