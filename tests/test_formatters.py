from datetime import datetime

import pytest

from storefront.constants import PLACEHOLDER_IMAGE
from storefront.utils.formatters import (
    format_price,
    format_timestamp,
    image_url,
    money,
    parse_number,
    product_details_line,
)
from storefront.utils.validators import positive_int, require_positive_number


@pytest.mark.parametrize(
    "value, expected",
    [
        (0, "0"),
        (999, "999"),
        (1000, "1\u00a0000"),
        (1234567, "1\u00a0234\u00a0567"),
        (1234.5, "1\u00a0234,5"),
        (0.1234, "0,123"),
        ("1500", "1\u00a0500"),
        ("abc", "0"),
        (None, "0"),
    ],
)
def test_format_price_uses_russian_grouping(value, expected):
    assert format_price(value) == expected


def test_money_uses_given_currency():
    assert money(1500, "$") == "1\u00a0500 $"


def test_parse_number_takes_leading_numeric_prefix():
    assert parse_number("12.5 мл") == 12.5
    assert parse_number("  7") == 7.0
    assert parse_number("-3") == -3.0
    assert parse_number("n/a") == 0.0
    assert parse_number(True) == 0.0
    assert parse_number(float("nan")) == 0.0


def test_format_timestamp_matches_ru_locale_layout():
    assert format_timestamp(datetime(2026, 10, 19, 9, 5, 3)) == "19.10.2026, 09:05:03"


def test_image_url_falls_back_to_placeholder():
    assert image_url(None) == PLACEHOLDER_IMAGE
    assert image_url("") == PLACEHOLDER_IMAGE
    assert image_url("ftp://cdn/img.jpg") == PLACEHOLDER_IMAGE
    assert image_url("  https://cdn/img.jpg ") == "https://cdn/img.jpg"


def test_product_details_line():
    assert product_details_line("EDP", "50 ml") == "EDP • 50 ml"
    assert product_details_line("EDP", None) == "EDP"
    assert product_details_line(None, None) == ""


def test_positive_int():
    assert positive_int(5) == 5
    assert positive_int("7") == 7
    assert positive_int(3.0) == 3
    assert positive_int(3.5) is None
    assert positive_int(0) is None
    assert positive_int(-2) is None
    assert positive_int("x") is None
    assert positive_int("²") is None
    assert positive_int(" 12 ") == 12
    assert positive_int(True) is None
    assert positive_int(None) is None


def test_require_positive_number():
    require_positive_number(1)
    with pytest.raises(ValueError):
        require_positive_number(0, "delta")
