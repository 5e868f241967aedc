from datetime import datetime, timezone
from decimal import Decimal

import pytest

from app.errors import ValidationError
from app.schemas import validate_draft
from tests.conftest import coffee


def test_valid_draft():
    draft = validate_draft(coffee())
    assert draft.description == "Coffee"
    assert draft.amount == Decimal("4.50")
    assert draft.category == "Food"
    assert draft.date == datetime(2024, 1, 1)


def test_amount_is_decimal_with_two_places():
    draft = validate_draft(coffee(amount="5"))
    assert isinstance(draft.amount, Decimal)
    assert str(draft.amount) == "5.00"


def test_negative_amount_is_accepted():
    assert validate_draft(coffee(amount="-12.30")).amount == Decimal("-12.30")


def test_more_than_two_fraction_digits_rejected():
    with pytest.raises(ValidationError) as exc:
        validate_draft(coffee(amount="1.005"))
    assert "amount" in exc.value.errors


@pytest.mark.parametrize("amount", ["", "   ", None])
def test_blank_amount_is_required(amount):
    with pytest.raises(ValidationError) as exc:
        validate_draft(coffee(amount=amount))
    assert exc.value.errors == {"amount": "Amount is required."}


def test_missing_amount_key():
    data = coffee()
    del data["amount"]
    with pytest.raises(ValidationError) as exc:
        validate_draft(data)
    assert exc.value.errors["amount"] == "Amount is required."


def test_non_numeric_amount():
    with pytest.raises(ValidationError) as exc:
        validate_draft(coffee(amount="lots"))
    assert set(exc.value.errors) == {"amount"}


def test_blank_text_fields_collect_all_messages():
    with pytest.raises(ValidationError) as exc:
        validate_draft(coffee(description="  ", category=""))
    assert exc.value.errors == {
        "description": "Description is required.",
        "category": "Category is required.",
    }


def test_text_fields_are_stripped():
    draft = validate_draft(coffee(description="  Tea  ", category=" Drinks"))
    assert draft.description == "Tea"
    assert draft.category == "Drinks"


def test_date_defaults_to_now():
    before = datetime.now(timezone.utc).replace(tzinfo=None)
    draft = validate_draft(coffee(date=""))
    after = datetime.now(timezone.utc).replace(tzinfo=None)
    assert before <= draft.date <= after


def test_datetime_local_value():
    assert validate_draft(coffee(date="2024-03-05T18:45")).date == datetime(2024, 3, 5, 18, 45)


def test_aware_date_converted_to_utc():
    draft = validate_draft(coffee(date="2024-03-05T12:00:00+02:00"))
    assert draft.date == datetime(2024, 3, 5, 10, 0)
    assert draft.date.tzinfo is None


def test_bad_date():
    with pytest.raises(ValidationError) as exc:
        validate_draft(coffee(date="yesterday"))
    assert exc.value.errors == {"date": "Enter a valid date."}


def test_owner_and_id_are_not_part_of_draft():
    draft = validate_draft(coffee(user_id="u2", id="7"))
    assert not hasattr(draft, "user_id")
    assert "id" not in draft.model_dump()
