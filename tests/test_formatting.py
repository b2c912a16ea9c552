"""Test currency formatting and option-kind parsing."""
from decimal import Decimal

import pytest

from verticals.altars.formatting import format_amount, format_currency
from verticals.altars.models.schemas import OptionKind


@pytest.mark.parametrize(
    "amount,expected",
    [
        (Decimal("250"), "$250.00"),
        (Decimal("1234.5"), "$1,234.50"),
        (Decimal("0.005"), "$0.01"),
        (Decimal("-1234.5"), "-$1,234.50"),
        ("1000000", "$1,000,000.00"),
    ],
)
def test_format_currency(amount, expected):
    assert format_currency(amount) == expected


def test_format_amount_has_no_symbol():
    assert format_amount(Decimal("2550")) == "2,550.00"


@pytest.mark.parametrize(
    "label,expected",
    [
        ("thickness", OptionKind.THICKNESS),
        ("grosor", OptionKind.THICKNESS),
        (" Height ", OptionKind.HEIGHT),
        ("anchura", OptionKind.WIDTH),
    ],
)
def test_option_kind_parse(label, expected):
    assert OptionKind.parse(label) is expected


def test_option_kind_parse_unknown():
    with pytest.raises(ValueError):
        OptionKind.parse("depth")
