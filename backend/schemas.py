from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from backend.periods import parse_datetime, to_local_naive


class TransactionType(str, Enum):
    INCOME = "income"
    EXPENSE = "expense"


class ResponseMode(str, Enum):
    """Shape of the transaction list response.

    ``ARRAY`` is the bare list the dashboard consumes; ``PAGINATED`` is the
    ``{data, pagination}`` envelope. The mode is chosen by whether the caller
    sent a ``page`` parameter and both shapes are part of the public API.
    """

    ARRAY = "array"
    PAGINATED = "paginated"

    @classmethod
    def from_page_param(cls, page: str | None) -> "ResponseMode":
        return cls.PAGINATED if page is not None and page != "" else cls.ARRAY


class ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def _coerce_datetime(value):
    if isinstance(value, str):
        if not value.strip():
            return None
        return parse_datetime(value)
    if isinstance(value, datetime):
        return to_local_naive(value)
    return value


class TransactionPayload(BaseModel):
    type: TransactionType
    category: str
    amount: float
    description: str | None = None
    date: datetime | None = None

    @field_validator("date", mode="before")
    @classmethod
    def normalize_date(cls, value):
        return _coerce_datetime(value)

    @field_validator("category")
    @classmethod
    def strip_category(cls, value: str) -> str:
        return value.strip()


class TransactionUpdatePayload(BaseModel):
    """Partial update. Only fields present in the request body are applied."""

    type: TransactionType | None = None
    category: str | None = None
    amount: float | None = None
    description: str | None = None
    date: datetime | None = None

    @field_validator("date", mode="before")
    @classmethod
    def normalize_date(cls, value):
        return _coerce_datetime(value)

    @field_validator("category")
    @classmethod
    def strip_category(cls, value: str | None) -> str | None:
        return value.strip() if value is not None else None

    def changes(self) -> dict:
        values = {}
        for name in self.model_fields_set:
            value = getattr(self, name)
            if value is None and name != "description":
                raise ValueError(f"{name} cannot be null.")
            if isinstance(value, TransactionType):
                value = value.value
            values[name] = value
        return values


class TransactionResponse(ApiModel):
    id: int
    user_id: int
    type: str
    category: str
    amount: float
    description: str | None = None
    date: datetime
    created_at: datetime | None = None
    updated_at: datetime | None = None


class PaginationInfo(ApiModel):
    total: int
    page: int
    total_pages: int
    limit: int


class PaginatedTransactions(ApiModel):
    data: list[TransactionResponse]
    pagination: PaginationInfo


class CategorySum(ApiModel):
    category: str | None = Field(alias="_id")
    sum: float


class TransactionStatsResponse(ApiModel):
    income: float
    expenses: float
    balance: float
    categories: list[CategorySum]


class BudgetPayload(BaseModel):
    month: int = Field(ge=1, le=12)
    year: int = Field(ge=1, le=9999)
    amount: float


class BudgetResponse(ApiModel):
    id: int
    user_id: int
    month: int
    year: int
    amount: float
    created_at: datetime | None = None
    updated_at: datetime | None = None


class BudgetSummaryResponse(ApiModel):
    budget: float
    total_expenses: float
    balance: float


class RegisterPayload(BaseModel):
    name: str | None = None
    email: str
    password: str


class LoginPayload(BaseModel):
    email: str
    password: str


class UserResponse(ApiModel):
    id: int
    email: str
    name: str | None = None
    created_at: datetime | None = None


class AuthResponse(ApiModel):
    token: str
    user: UserResponse


class MessageResponse(ApiModel):
    message: str
