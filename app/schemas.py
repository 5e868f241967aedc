# app/schemas.py

from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic_core import PydanticCustomError

from .errors import ValidationError
from .models import CENT, utcnow

# Error types that all mean "nothing usable was submitted"
_REQUIRED_TYPES = {"missing", "string_too_short", "required"}

_LABELS = {
    "description": "Description",
    "amount": "Amount",
    "category": "Category",
    "date": "Date",
}


class ExpenseDraft(BaseModel):
    """Caller-submitted expense data, before it is persisted.

    Anything else in the submitted data (``id``, ``user_id``, ...) is
    dropped: ownership always comes from the logged-in user.
    """

    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)

    description: str = Field(min_length=1)
    amount: Decimal = Field(max_digits=18, decimal_places=2)
    category: str = Field(min_length=1)
    date: Optional[datetime] = Field(default=None, validate_default=True)

    @field_validator("amount", mode="before")
    @classmethod
    def amount_present(cls, v):
        if v is None or (isinstance(v, str) and not v.strip()):
            raise PydanticCustomError("required", "Amount is required.")
        return v.strip() if isinstance(v, str) else v

    @field_validator("amount")
    @classmethod
    def two_places(cls, v: Decimal) -> Decimal:
        # no sign or size policy, only monetary precision
        return v.quantize(CENT)

    @field_validator("date", mode="before")
    @classmethod
    def parse_date(cls, v):
        if v is None:
            return None
        if isinstance(v, str):
            v = v.strip()
            if not v:
                return None
            try:
                # accepts "2024-01-01" as well as "2024-01-01T10:30"
                return datetime.fromisoformat(v)
            except ValueError:
                raise PydanticCustomError("date_parsing", "Enter a valid date.")
        return v

    @field_validator("date")
    @classmethod
    def default_now(cls, v: Optional[datetime]) -> datetime:
        if v is None:
            return utcnow()
        if v.tzinfo is not None:
            v = v.astimezone(timezone.utc).replace(tzinfo=None)
        return v


def validate_draft(data) -> ExpenseDraft:
    """Validate form/JSON data into a draft or raise ValidationError."""
    try:
        return ExpenseDraft.model_validate(dict(data))
    except PydanticValidationError as exc:
        errors = {}
        for err in exc.errors():
            field = str(err["loc"][0]) if err["loc"] else "__all__"
            if field in errors:
                continue
            if err["type"] in _REQUIRED_TYPES:
                errors[field] = f"{_LABELS.get(field, field.title())} is required."
            else:
                errors[field] = err["msg"]
        raise ValidationError(errors) from None
