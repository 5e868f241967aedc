import enum
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from .logger import get_logger
from .models import Expense, User
from .schemas import ExpenseDraft

logger = get_logger(__name__)


class UpdateResult(enum.Enum):
    UPDATED = "updated"
    CONFLICT = "conflict"


def get_expense(db: Session, expense_id: int) -> Optional[Expense]:
    return db.get(Expense, expense_id)


def get_expense_owner(db: Session, expense: Expense) -> Optional[User]:
    # owner is looked up on demand, there is no relationship on the model
    return db.get(User, expense.user_id)


def list_expenses(db: Session, user_id: str) -> List[Expense]:
    return (
        db.query(Expense)
        .filter(Expense.user_id == user_id)
        .order_by(Expense.date.desc(), Expense.id.desc())
        .all()
    )


def add_expense(db: Session, user_id: str, draft: ExpenseDraft) -> Expense:
    expense = Expense(
        user_id=user_id,
        description=draft.description,
        amount=draft.amount,
        category=draft.category,
        date=draft.date,
    )
    db.add(expense)
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Failed to add expense for user %s", user_id)
        raise
    db.refresh(expense)
    return expense


def update_expense(
    db: Session,
    expense: Expense,
    draft: ExpenseDraft,
    expected_version: Optional[int] = None,
) -> UpdateResult:
    """Apply ``draft`` to ``expense`` and commit.

    ``expected_version`` is the row version the caller read. A mismatch,
    or a row that changed/vanished before the UPDATE landed, comes back as
    ``UpdateResult.CONFLICT`` with the session rolled back. ``id`` and
    ``user_id`` are never touched.
    """
    if expected_version is not None and expected_version != expense.version_id:
        logger.warning(
            "Expense %s is at version %s, caller read version %s",
            expense.id, expense.version_id, expected_version,
        )
        return UpdateResult.CONFLICT

    expense.description = draft.description
    expense.amount = draft.amount
    expense.category = draft.category
    expense.date = draft.date
    try:
        db.commit()
    except StaleDataError as exc:
        db.rollback()
        logger.error("Concurrency error updating expense: %s", exc)
        return UpdateResult.CONFLICT
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Failed to update expense")
        raise
    db.refresh(expense)
    return UpdateResult.UPDATED


def delete_expense(db: Session, expense: Expense) -> bool:
    """Hard delete. False when the row was already gone."""
    db.delete(expense)
    try:
        db.commit()
    except StaleDataError as exc:
        db.rollback()
        logger.warning("Expense vanished before delete: %s", exc)
        return False
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Failed to delete expense")
        raise
    return True
