from storefront.constants import SORT_ASC, SORT_DESC
from storefront.models import Product
from storefront.services.search import filter_and_sort, normalize_query, price_key, toggle_direction

CATALOG = [
    Product(id=1, name="Aqua", price=1000.0, concentration="EDT"),
    Product(id=2, name="Noir", price=500.0, concentration="Parfum"),
    Product(id=3, name="Bleu", price=500.0, concentration="EDP", volume="noir 100"),
    Product(id=4, name="Rose Noire", price=1500.0),
    Product(id=5, name="Ambre", price=500.0, concentration="EDP"),
]


def ids(products):
    return [p.id for p in products]


def test_query_matches_name_substring_case_insensitive():
    small = CATALOG[:2]
    assert ids(filter_and_sort(small, "noi", SORT_ASC)) == [2]
    assert ids(filter_and_sort(small, "  NOI ", SORT_ASC)) == [2]


def test_query_matches_concentration_but_not_volume():
    assert ids(filter_and_sort(CATALOG, "edp", SORT_ASC)) == [3, 5]
    assert 3 not in ids(filter_and_sort(CATALOG, "noir", SORT_ASC))


def test_empty_query_returns_everything_sorted_by_price():
    assert ids(filter_and_sort(CATALOG, "", SORT_ASC)) == [2, 3, 5, 1, 4]
    assert ids(filter_and_sort(CATALOG, None, SORT_ASC)) == [2, 3, 5, 1, 4]


def test_equal_prices_keep_input_order_in_both_directions():
    assert ids(filter_and_sort(CATALOG, "", SORT_DESC)) == [4, 1, 2, 3, 5]


def test_result_is_subset_of_catalog():
    for q in ("", "a", "edp", "zzz", "noir"):
        found = filter_and_sort(CATALOG, q, SORT_DESC)
        assert set(ids(found)) <= set(ids(CATALOG))


def test_resorting_is_idempotent():
    once = filter_and_sort(CATALOG, "", SORT_ASC)
    assert filter_and_sort(once, "", SORT_ASC) == once


def test_toggle_twice_restores_order():
    direction = SORT_ASC
    before = filter_and_sort(CATALOG, "", direction)
    direction = toggle_direction(toggle_direction(direction))
    assert direction == SORT_ASC
    assert filter_and_sort(CATALOG, "", direction) == before


def test_non_numeric_price_sorts_as_zero():
    odd = Product(id=9, name="Sample", price="по запросу")  # type: ignore[arg-type]
    assert price_key(odd) == 0
    assert ids(filter_and_sort([CATALOG[0], odd], "", SORT_ASC)) == [9, 1]


def test_normalize_query():
    assert normalize_query("  НоИр ") == "ноир"
    assert normalize_query(None) == ""
