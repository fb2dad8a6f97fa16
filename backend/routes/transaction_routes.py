import logging
import math
from datetime import datetime

from fastapi import APIRouter, Depends, Query
from sqlalchemy.exc import SQLAlchemyError

from backend.auth import get_current_user, get_database
from backend.database import Database
from backend.errors import (
    AccessDenied,
    InternalError,
    NotFound,
    ValidationFailed,
    translate_store_errors,
)
from backend.periods import end_of_day, parse_datetime
from backend.schemas import (
    CategorySum,
    MessageResponse,
    PaginatedTransactions,
    PaginationInfo,
    ResponseMode,
    TransactionPayload,
    TransactionResponse,
    TransactionStatsResponse,
    TransactionUpdatePayload,
)
from backend.transaction_store import (
    TransactionFilter,
    count_transactions,
    delete_transaction,
    distinct_categories,
    get_transaction,
    insert_transaction,
    list_transactions,
    transaction_stats,
    update_transaction,
)

logger = logging.getLogger(__name__)

router = APIRouter()

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
MAX_PAGE = 1_000_000
MAX_LIMIT = 1000


def parse_positive_int(value: str | None, default: int, maximum: int) -> int:
    if value is None:
        return default
    try:
        parsed = int(value)
    except ValueError:
        return default
    return parsed if 1 <= parsed <= maximum else default


def parse_amount(value: str | None, name: str) -> float | None:
    if value is None or value == "":
        return None
    try:
        return float(value)
    except ValueError as exc:
        raise ValidationFailed(f"Invalid {name}: {value!r}.") from exc


def parse_date_range(
    start_date: str | None, end_date: str | None
) -> tuple[datetime | None, datetime | None]:
    """Parse an inclusive date range; the end covers its whole day."""
    try:
        start = parse_datetime(start_date) if start_date else None
        end = end_of_day(parse_datetime(end_date)) if end_date else None
    except ValueError as exc:
        raise ValidationFailed(str(exc)) from exc
    return start, end


MAX_ID = 2**63 - 1


def parse_transaction_id(value: str) -> int:
    try:
        record_id = int(value)
    except ValueError as exc:
        raise NotFound("Transaction not found") from exc
    if not 1 <= record_id <= MAX_ID:
        raise NotFound("Transaction not found")
    return record_id


def load_owned_transaction(db: Database, transaction_id: int, user: dict, message: str) -> dict:
    with translate_store_errors(message):
        existing = get_transaction(db, transaction_id)
    if not existing:
        raise NotFound("Transaction not found")
    if existing["user_id"] != user["id"]:
        raise AccessDenied("Access denied")
    return existing


@router.post("", response_model=TransactionResponse, status_code=201)
def add_transaction(
    payload: TransactionPayload,
    user: dict = Depends(get_current_user),
    db: Database = Depends(get_database),
) -> TransactionResponse:
    values = {
        "type": payload.type.value,
        "category": payload.category,
        "amount": payload.amount,
        "description": payload.description,
        "date": payload.date or datetime.now(),
    }
    with translate_store_errors("Transaction creation failed"):
        row = insert_transaction(db, user["id"], values)
    return TransactionResponse(**row)


@router.get("", response_model=list[TransactionResponse] | PaginatedTransactions)
def get_transactions(
    page: str | None = None,
    limit: str | None = None,
    type: str | None = None,
    category: str | None = None,
    start_date: str | None = Query(None, alias="startDate"),
    end_date: str | None = Query(None, alias="endDate"),
    min_amount: str | None = Query(None, alias="minAmount"),
    max_amount: str | None = Query(None, alias="maxAmount"),
    user: dict = Depends(get_current_user),
    db: Database = Depends(get_database),
) -> list[TransactionResponse] | PaginatedTransactions:
    start, end = parse_date_range(start_date, end_date)
    criteria = TransactionFilter(
        user_id=user["id"],
        type=type,
        category=category,
        start_date=start,
        end_date=end,
        min_amount=parse_amount(min_amount, "minAmount"),
        max_amount=parse_amount(max_amount, "maxAmount"),
    )
    mode = ResponseMode.from_page_param(page)
    current_page = parse_positive_int(page, DEFAULT_PAGE, MAX_PAGE)
    per_page = parse_positive_int(limit, DEFAULT_LIMIT, MAX_LIMIT)

    try:
        if mode is ResponseMode.ARRAY:
            rows = list_transactions(db, criteria)
            return [TransactionResponse(**row) for row in rows]

        total = count_transactions(db, criteria)
        rows = list_transactions(
            db, criteria, offset=(current_page - 1) * per_page, limit=per_page
        )
    except SQLAlchemyError as exc:
        logger.exception("Transaction fetch error")
        raise InternalError("Unable to retrieve transactions", str(exc)) from exc

    return PaginatedTransactions(
        data=[TransactionResponse(**row) for row in rows],
        pagination=PaginationInfo(
            total=total,
            page=current_page,
            total_pages=math.ceil(total / per_page),
            limit=per_page,
        ),
    )


@router.get("/stats", response_model=TransactionStatsResponse)
def get_transaction_stats(
    start_date: str | None = Query(None, alias="startDate"),
    end_date: str | None = Query(None, alias="endDate"),
    user: dict = Depends(get_current_user),
    db: Database = Depends(get_database),
) -> TransactionStatsResponse:
    start, end = parse_date_range(start_date, end_date)
    criteria = TransactionFilter(user_id=user["id"], start_date=start, end_date=end)
    with translate_store_errors("Unable to calculate statistics"):
        stats = transaction_stats(db, criteria)
    return TransactionStatsResponse(
        income=stats.income,
        expenses=stats.expenses,
        balance=stats.balance,
        categories=[
            CategorySum(category=category, sum=total) for category, total in stats.categories
        ],
    )


@router.get("/categories", response_model=list[str])
def get_categories(
    user: dict = Depends(get_current_user),
    db: Database = Depends(get_database),
) -> list[str]:
    with translate_store_errors("Unable to fetch categories"):
        return distinct_categories(db, user["id"])


@router.put("/{transaction_id}", response_model=TransactionResponse)
def edit_transaction(
    transaction_id: str,
    payload: TransactionUpdatePayload,
    user: dict = Depends(get_current_user),
    db: Database = Depends(get_database),
) -> TransactionResponse:
    record_id = parse_transaction_id(transaction_id)
    existing = load_owned_transaction(db, record_id, user, "Update failed")
    try:
        changes = payload.changes()
    except ValueError as exc:
        raise ValidationFailed(str(exc)) from exc
    if not changes:
        return TransactionResponse(**existing)

    with translate_store_errors("Update failed"):
        row = update_transaction(db, record_id, user["id"], changes)
    if not row:
        raise NotFound("Transaction not found")
    return TransactionResponse(**row)


@router.delete("/{transaction_id}", response_model=MessageResponse)
def remove_transaction(
    transaction_id: str,
    user: dict = Depends(get_current_user),
    db: Database = Depends(get_database),
) -> MessageResponse:
    record_id = parse_transaction_id(transaction_id)
    load_owned_transaction(db, record_id, user, "Deletion failed")
    with translate_store_errors("Deletion failed"):
        deleted = delete_transaction(db, record_id, user["id"])
    if not deleted:
        raise NotFound("Transaction not found")
    return MessageResponse(message="Transaction removed successfully")
