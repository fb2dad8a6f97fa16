from sqlalchemy import insert, select
from sqlalchemy.exc import IntegrityError

from backend.database import Database, users

PUBLIC_COLUMNS = (users.c.id, users.c.email, users.c.name, users.c.created_at)


class EmailTaken(ValueError):
    pass


def get_public_user(db: Database, user_id: int) -> dict | None:
    """Look up a user by id without the password hash."""
    with db.begin() as conn:
        row = conn.execute(select(*PUBLIC_COLUMNS).where(users.c.id == user_id)).mappings().first()
    return dict(row) if row else None


def get_user_by_email(db: Database, email: str) -> dict | None:
    with db.begin() as conn:
        row = conn.execute(select(users).where(users.c.email == email)).mappings().first()
    return dict(row) if row else None


def create_user(db: Database, email: str, hashed_password: str, name: str | None = None) -> dict:
    stmt = (
        insert(users)
        .values(email=email, hashed_password=hashed_password, name=name)
        .returning(*PUBLIC_COLUMNS)
    )
    try:
        with db.begin() as conn:
            row = conn.execute(stmt).mappings().first()
    except IntegrityError as exc:
        raise EmailTaken(email) from exc
    return dict(row)
