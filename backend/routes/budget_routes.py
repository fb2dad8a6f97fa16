from datetime import date

from fastapi import APIRouter, Depends

from backend.auth import get_current_user, get_database
from backend.budget_store import find_budget, upsert_budget
from backend.database import Database
from backend.errors import ValidationFailed, translate_store_errors
from backend.periods import month_bounds
from backend.schemas import BudgetPayload, BudgetResponse, BudgetSummaryResponse
from backend.transaction_store import TransactionFilter, sum_amount

router = APIRouter()


def resolve_period(month: str | None, year: str | None, today: date) -> tuple[int, int]:
    """Month/year from query parameters, falling back to the current period."""
    try:
        target_month = int(month) if month else today.month
        target_year = int(year) if year else today.year
    except ValueError as exc:
        raise ValidationFailed("Month and year must be integers.") from exc
    if not 1 <= target_month <= 12:
        raise ValidationFailed("Month must be between 1 and 12.")
    return target_month, target_year


@router.post("", response_model=BudgetResponse, status_code=201)
def set_budget(
    payload: BudgetPayload,
    user: dict = Depends(get_current_user),
    db: Database = Depends(get_database),
) -> BudgetResponse:
    with translate_store_errors("Budget operation failed"):
        row = upsert_budget(db, user["id"], payload.month, payload.year, payload.amount)
    return BudgetResponse(**row)


@router.get("/summary", response_model=BudgetSummaryResponse)
def get_budget_summary(
    month: str | None = None,
    year: str | None = None,
    user: dict = Depends(get_current_user),
    db: Database = Depends(get_database),
) -> BudgetSummaryResponse:
    target_month, target_year = resolve_period(month, year, date.today())
    try:
        start, end = month_bounds(target_year, target_month)
    except ValueError as exc:
        raise ValidationFailed(str(exc)) from exc

    with translate_store_errors("Unable to fetch budget summary"):
        budget = find_budget(db, user["id"], target_month, target_year)
        total_expenses = sum_amount(
            db,
            TransactionFilter(user_id=user["id"], start_date=start, end_date=end),
            "expense",
        )
    budget_amount = budget["amount"] if budget else 0.0
    return BudgetSummaryResponse(
        budget=budget_amount,
        total_expenses=total_expenses,
        balance=budget_amount - total_expenses,
    )
