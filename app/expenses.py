"""
Expense operations for the logged-in user.

Every function takes the current user id explicitly and either returns
its result or raises one of the outcomes in ``app.errors``. Ownership is
checked here, the store itself does not filter by user.
"""

from typing import List, Mapping, Optional

from sqlalchemy.orm import Session

from . import crud
from .errors import ConcurrencyConflict, Forbidden, NotFound, Unauthenticated, ValidationError
from .logger import get_logger
from .models import Expense
from .schemas import validate_draft

logger = get_logger(__name__)


def _require_user(current_user: Optional[str]) -> str:
    if not current_user:
        logger.warning("User ID is missing. Redirecting to login.")
        raise Unauthenticated()
    return current_user


def _owned_expense(db: Session, current_user: str, expense_id: int, action: str) -> Expense:
    expense = crud.get_expense(db, expense_id)
    if expense is None:
        logger.warning("Expense with ID %s not found.", expense_id)
        raise NotFound(expense_id)
    if expense.user_id != current_user:
        logger.warning(
            "Unauthorized attempt to %s expense ID %s by user %s",
            action, expense_id, current_user,
        )
        raise Forbidden(expense_id)
    return expense


def _submitted_int(data: Mapping, key: str):
    raw = data.get(key)
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        return None
    return int(raw)


def list_for_user(db: Session, current_user: Optional[str]) -> List[Expense]:
    user_id = _require_user(current_user)
    expenses = crud.list_expenses(db, user_id)
    logger.info("Found %d expenses for user %s", len(expenses), user_id)
    return expenses


def create(db: Session, current_user: Optional[str], data: Mapping) -> Expense:
    user_id = _require_user(current_user)
    try:
        draft = validate_draft(data)
    except ValidationError as exc:
        logger.warning("Expense validation failed: %s", "; ".join(exc.errors.values()))
        raise

    # user_id from the form, if any, never reaches the draft
    expense = crud.add_expense(db, user_id, draft)
    logger.info("Expense %s added for user %s", expense.id, user_id)
    return expense


def get_for_edit(db: Session, current_user: Optional[str], expense_id: int) -> Expense:
    user_id = _require_user(current_user)
    return _owned_expense(db, user_id, expense_id, "edit")


def edit(db: Session, current_user: Optional[str], expense_id: int, data: Mapping) -> Expense:
    """Update description/amount/category/date of one of the user's expenses.

    A submitted ``id`` that differs from ``expense_id`` is treated exactly
    like a missing row. A submitted ``version`` is the row version the
    form was rendered from.
    """
    user_id = _require_user(current_user)

    try:
        submitted_id = _submitted_int(data, "id")
    except ValueError:
        submitted_id = -1
    if submitted_id is not None and submitted_id != expense_id:
        logger.warning("Edit failed: submitted ID %s does not match %s", data.get("id"), expense_id)
        raise NotFound(expense_id)

    expense = _owned_expense(db, user_id, expense_id, "edit")

    try:
        draft = validate_draft(data)
    except ValidationError as exc:
        logger.warning("Expense validation failed: %s", "; ".join(exc.errors.values()))
        raise
    try:
        expected_version = _submitted_int(data, "version")
    except ValueError:
        raise ValidationError({"version": "Invalid row version."})

    result = crud.update_expense(db, expense, draft, expected_version)
    if result is crud.UpdateResult.CONFLICT:
        logger.error("Concurrency conflict updating expense ID %s", expense_id)
        raise ConcurrencyConflict(expense_id)

    logger.info("Expense ID %s updated successfully.", expense_id)
    return expense


def delete(db: Session, current_user: Optional[str], expense_id: int) -> None:
    user_id = _require_user(current_user)
    expense = _owned_expense(db, user_id, expense_id, "delete")
    if not crud.delete_expense(db, expense):
        raise NotFound(expense_id)
    logger.info("Expense with ID %s deleted successfully.", expense_id)
