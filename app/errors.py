# app/errors.py
#
# Expected, user-facing outcomes of the expense operations. None of these
# is a crash: main.py turns each one into a redirect, a status code or a
# re-rendered form.


class ExpenseError(Exception):
    """Base class for expense operation outcomes."""


class Unauthenticated(ExpenseError):
    """No resolvable user for the request."""


class NotFound(ExpenseError):
    """Target row is absent, or the submitted id does not match the route."""


class Forbidden(ExpenseError):
    """Row exists but belongs to somebody else."""


class ValidationError(ExpenseError):
    """Draft failed validation; ``errors`` maps field name to message."""

    def __init__(self, errors: dict):
        super().__init__(errors)
        self.errors = errors


class ConcurrencyConflict(ExpenseError):
    """The write lost a race: row changed or vanished since it was read."""
