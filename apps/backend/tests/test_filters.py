"""搜尋與篩選測試"""

import pytest

from vault.core.filters import FilterCriteria, filter_assets, passes_filter, sort_for_display
from vault.core.models import Asset


@pytest.fixture
def laptop() -> Asset:
    return Asset(
        origin_id="ID_laptop",
        name="Laptop X",
        category="Electronics",
        channel="京東",
        subcategory=["工作", "Portable"],
        amount="1299.5/年",
        date="2025-03-10",
        note="公司配發",
    )


def test_category_criteria(laptop):
    assert passes_filter(laptop, criteria=FilterCriteria(category="Electronics"))
    assert not passes_filter(laptop, criteria=FilterCriteria(category="Other"))


def test_keyword_is_case_insensitive_across_fields(laptop):
    assert passes_filter(laptop, search_keyword="lap")
    assert passes_filter(laptop, search_keyword="PORTABLE")
    assert passes_filter(laptop, search_keyword="配發")
    assert passes_filter(laptop, search_keyword="京")
    assert not passes_filter(laptop, search_keyword="desktop")


def test_channel_and_tag(laptop):
    assert passes_filter(laptop, criteria=FilterCriteria(channel="京東", tag="工作"))
    assert not passes_filter(laptop, criteria=FilterCriteria(channel="淘寶"))
    assert not passes_filter(laptop, criteria=FilterCriteria(tag="工"))


def test_date_range_is_inclusive(laptop):
    assert passes_filter(laptop, criteria=FilterCriteria(date_from="2025-03-10", date_to="2025-03-10"))
    assert not passes_filter(laptop, criteria=FilterCriteria(date_from="2025-03-11"))
    assert not passes_filter(laptop, criteria=FilterCriteria(date_to="2025-03-09"))


def test_date_range_skipped_without_date(laptop):
    laptop.date = ""
    assert passes_filter(laptop, criteria=FilterCriteria(date_from="2030-01-01"))


def test_amount_range_uses_numeric_prefix(laptop):
    assert passes_filter(laptop, criteria=FilterCriteria(amount_min=1000, amount_max=1299.5))
    assert not passes_filter(laptop, criteria=FilterCriteria(amount_min="1300"))
    assert not passes_filter(laptop, criteria=FilterCriteria(amount_max="100"))


def test_criteria_accepts_camel_case_and_blank_values():
    criteria = FilterCriteria.model_validate(
        {"dateFrom": "2025-01-01", "amountMin": "", "amountMax": "50"}
    )
    assert criteria.date_from == "2025-01-01"
    assert criteria.amount_min is None
    assert criteria.amount_max == 50.0


def test_hides_component_assets_when_disabled():
    part = Asset(origin_id="p", name="零件")
    combo = Asset(origin_id="c", name="整機", is_composite=True, components=["p"])
    assets = [part, combo]

    assert filter_assets(assets, show_component_assets=False) == [combo]
    assert filter_assets(assets, show_component_assets=True) == assets


def test_sort_for_display_puts_latest_pin_first():
    a = Asset(origin_id="a", name="a")
    b = Asset(origin_id="b", name="b", pinned=True, pinned_time=100)
    c = Asset(origin_id="c", name="c")
    d = Asset(origin_id="d", name="d", pinned=True, pinned_time=200)

    ordered = sort_for_display([a, b, c, d])
    assert [x.origin_id for x in ordered] == ["d", "b", "a", "c"]
