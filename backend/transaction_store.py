from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import func, insert, select, update

from backend.database import Database, transactions


@dataclass(frozen=True)
class TransactionFilter:
    user_id: int
    type: str | None = None
    category: str | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
    min_amount: float | None = None
    max_amount: float | None = None

    def conditions(self) -> list:
        conditions = [transactions.c.user_id == self.user_id]
        if self.type:
            conditions.append(transactions.c.type == self.type)
        if self.category:
            conditions.append(transactions.c.category == self.category)
        if self.start_date is not None:
            conditions.append(transactions.c.date >= self.start_date)
        if self.end_date is not None:
            conditions.append(transactions.c.date <= self.end_date)
        if self.min_amount is not None:
            conditions.append(transactions.c.amount >= self.min_amount)
        if self.max_amount is not None:
            conditions.append(transactions.c.amount <= self.max_amount)
        return conditions


@dataclass(frozen=True)
class TransactionStats:
    income: float
    expenses: float
    categories: list[tuple[str, float]]

    @property
    def balance(self) -> float:
        return self.income - self.expenses


def insert_transaction(db: Database, user_id: int, values: dict) -> dict:
    stmt = insert(transactions).values(user_id=user_id, **values).returning(transactions)
    with db.begin() as conn:
        row = conn.execute(stmt).mappings().first()
    return dict(row)


def get_transaction(db: Database, transaction_id: int) -> dict | None:
    with db.begin() as conn:
        row = conn.execute(
            select(transactions).where(transactions.c.id == transaction_id)
        ).mappings().first()
    return dict(row) if row else None


def list_transactions(
    db: Database,
    criteria: TransactionFilter,
    offset: int | None = None,
    limit: int | None = None,
) -> list[dict]:
    stmt = (
        select(transactions)
        .where(*criteria.conditions())
        .order_by(transactions.c.date.desc(), transactions.c.id.desc())
    )
    if offset:
        stmt = stmt.offset(offset)
    if limit is not None:
        stmt = stmt.limit(limit)
    with db.begin() as conn:
        rows = conn.execute(stmt).mappings().all()
    return [dict(row) for row in rows]


def count_transactions(db: Database, criteria: TransactionFilter) -> int:
    stmt = select(func.count()).select_from(transactions).where(*criteria.conditions())
    with db.begin() as conn:
        return conn.execute(stmt).scalar_one()


def _sum_for_type(conn, conditions: list, txn_type: str) -> float:
    total_expr = func.coalesce(func.sum(transactions.c.amount), 0)
    total = conn.execute(
        select(total_expr).where(*conditions, transactions.c.type == txn_type)
    ).scalar_one()
    return float(total)


def sum_amount(db: Database, criteria: TransactionFilter, txn_type: str) -> float:
    with db.begin() as conn:
        return _sum_for_type(conn, criteria.conditions(), txn_type)


def transaction_stats(db: Database, criteria: TransactionFilter) -> TransactionStats:
    conditions = criteria.conditions()
    total_expr = func.sum(transactions.c.amount).label("total")
    breakdown_stmt = (
        select(transactions.c.category, total_expr)
        .where(*conditions, transactions.c.type == "expense")
        .group_by(transactions.c.category)
        .order_by(total_expr.desc())
    )
    with db.begin() as conn:
        income = _sum_for_type(conn, conditions, "income")
        expenses = _sum_for_type(conn, conditions, "expense")
        rows = conn.execute(breakdown_stmt).mappings().all()
    return TransactionStats(
        income=income,
        expenses=expenses,
        categories=[(row["category"], float(row["total"])) for row in rows],
    )


def distinct_categories(db: Database, user_id: int) -> list[str]:
    stmt = (
        select(transactions.c.category)
        .where(transactions.c.user_id == user_id)
        .distinct()
        .order_by(transactions.c.category)
    )
    with db.begin() as conn:
        return list(conn.execute(stmt).scalars().all())


def update_transaction(
    db: Database, transaction_id: int, user_id: int, changes: dict
) -> dict | None:
    stmt = (
        update(transactions)
        .where(transactions.c.id == transaction_id, transactions.c.user_id == user_id)
        .values(updated_at=datetime.now(), **changes)
        .returning(transactions)
    )
    with db.begin() as conn:
        row = conn.execute(stmt).mappings().first()
    return dict(row) if row else None


def delete_transaction(db: Database, transaction_id: int, user_id: int) -> bool:
    stmt = transactions.delete().where(
        transactions.c.id == transaction_id, transactions.c.user_id == user_id
    )
    with db.begin() as conn:
        result = conn.execute(stmt)
    return result.rowcount > 0
