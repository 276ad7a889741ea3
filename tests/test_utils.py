from decimal import Decimal

import pytest

from app.core.owner import GuestOwner, UserOwner, owner_columns, owner_from
from app.models.product import discounted_price
from app.utils.helpers import round_money
from app.utils.validators import missing_fields, parse_quantity


class TestParseQuantity:
    @pytest.mark.parametrize(
        "value, expected",
        [(3, 3), (2.9, 2), ("5", 5), (" 7 ", 7), ("4abc", 4), ("-2", -2)],
    )
    def test_numbers(self, value, expected):
        assert parse_quantity(value) == expected

    @pytest.mark.parametrize("value", [None, "", "abc", True, [1]])
    def test_falls_back_to_default(self, value):
        assert parse_quantity(value, default=1) == 1

    @pytest.mark.parametrize("value", [float("inf"), float("-inf"), float("nan")])
    def test_non_finite_floats_raise(self, value):
        with pytest.raises(ValueError):
            parse_quantity(value, default=1)


class TestMoney:
    def test_half_up(self):
        assert round_money("2.345") == Decimal("2.35")
        assert round_money(Decimal("2.344")) == Decimal("2.34")

    def test_discounted_price_keeps_precision(self):
        assert discounted_price(Decimal("9.99"), Decimal("15")) == Decimal("8.4915")
        assert discounted_price(Decimal("10.00"), None) == Decimal("10.00")


class TestOwner:
    def test_user_wins_over_guest(self):
        assert owner_from(user_id=7, session_id="abc") == UserOwner(7)

    def test_guest(self):
        assert owner_from(session_id="abc") == GuestOwner("abc")

    def test_nobody(self):
        assert owner_from() is None

    def test_columns_set_exactly_one_key(self):
        assert owner_columns(UserOwner(7)) == {"user_id": 7, "session_id": None}
        assert owner_columns(GuestOwner("abc")) == {"user_id": None, "session_id": "abc"}


def test_missing_fields_treats_blank_as_missing():
    data = {"a": "x", "b": "  ", "c": None}

    assert missing_fields(data, ["a", "b", "c", "d"]) == ["b", "c", "d"]
