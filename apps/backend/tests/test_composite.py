"""組合資產推導測試"""

from vault.core.composite import (
    UNKNOWN_COMPONENT,
    aggregate_amount,
    component_details,
    component_names,
    is_component_of,
    merge_tags,
    recompute_composite,
    used_component_ids,
)
from vault.core.models import Asset


def make_asset(origin_id, name="", amount="", tags=None, components=None, **extra) -> Asset:
    return Asset(
        origin_id=origin_id,
        name=name or origin_id,
        amount=amount,
        subcategory=tags or [],
        is_composite=components is not None,
        components=components or [],
        **extra,
    )


def test_aggregate_amount_sums_components():
    a = make_asset("a", amount="100.5")
    b = make_asset("b", amount="200.3")
    combo = make_asset("combo", components=["a", "b"])

    assert aggregate_amount(combo, [a, b, combo]) == "300.80"


def test_aggregate_amount_ignores_unit_suffix_and_dangling_ids():
    a = make_asset("a", amount="12.5/年")
    b = make_asset("b", amount="10")
    combo = make_asset("combo", components=["a", "missing", "b"])

    assert aggregate_amount(combo, [a, b, combo]) == "22.50"


def test_aggregate_amount_empty_when_nothing_resolves_or_sum_is_zero():
    zero = make_asset("zero", amount="0")
    dangling = make_asset("c1", components=["ghost"])
    free = make_asset("c2", components=["zero"])

    assert aggregate_amount(dangling, [dangling]) == ""
    assert aggregate_amount(free, [zero, free]) == ""


def test_aggregate_amount_keeps_own_amount_without_components():
    plain = make_asset("plain", amount="55")
    empty_combo = make_asset("combo", amount="9.9", components=[])

    assert aggregate_amount(plain, [plain]) == "55.00"
    assert aggregate_amount(empty_combo, [empty_combo]) == "9.90"


def test_is_component_of():
    a = make_asset("a")
    b = make_asset("b")
    combo = make_asset("combo", components=["a"])
    not_composite = Asset(origin_id="other", name="other", components=["b"])

    assets = [a, b, combo, not_composite]
    assert is_component_of(a, assets)
    assert not is_component_of(b, assets)
    assert not is_component_of(combo, assets)
    assert used_component_ids(assets) == {"a"}


def test_merge_tags_is_ordered_union():
    a = make_asset("a", tags=["標籤1", "標籤2"])
    b = make_asset("b", tags=[" 標籤2 ", "標籤3", "Tag", "tag"])
    combo = make_asset("combo", tags=["標籤1"], components=["a", "b", "ghost"])

    assert merge_tags(combo, [a, b, combo]) == ["標籤1", "標籤2", "標籤3", "Tag", "tag"]


def test_component_details_date_falls_back_to_date():
    a = make_asset("a", name="主機", purchase_date="2025-01-15", date="2024-01-01")
    b = make_asset("b", name="螢幕", date="2025-02-20")
    c = make_asset("c", name="滑鼠")
    combo = make_asset("combo", components=["a", "b", "c", "ghost"])
    assets = [a, b, c, combo]

    details = component_details(combo, "date", assets)
    assert [(d.name, d.value) for d in details] == [
        ("主機", "2025-01-15"),
        ("螢幕", "2025-02-20"),
    ]


def test_component_details_channel():
    a = make_asset("a", name="主機", channel="京東")
    b = make_asset("b", name="螢幕")
    combo = make_asset("combo", components=["a", "b"])

    details = component_details(combo, "channel", [a, b, combo])
    assert [(d.name, d.value) for d in details] == [("主機", "京東")]
    assert component_details(a, "channel", [a]) == []


def test_component_names_marks_dangling_as_unknown():
    a = make_asset("a", name="主機")
    combo = make_asset("combo", components=["a", "ghost"])

    assert component_names(combo, [a, combo]) == ["主機", UNKNOWN_COMPONENT]


def test_recompute_is_idempotent_and_pure():
    a = make_asset("a", amount="100", tags=["x"])
    b = make_asset("b", amount="50.25", tags=["y"])
    combo = make_asset("combo", tags=["z"], components=["a", "b"])
    assets = [a, b, combo]

    once = recompute_composite(combo, assets)
    twice = recompute_composite(once, [a, b, once])

    assert once.amount == once.purchase_price == "150.25"
    assert once.subcategory == ["z", "x", "y"]
    assert twice.model_dump() == once.model_dump()
    assert combo.amount == ""


def test_aggregate_amount_rounds_before_zero_check():
    first = make_asset("first", amount="-0.1")
    second = make_asset("second", amount="-0.2")
    refund = make_asset("refund", amount="0.3")
    huge = make_asset("huge", amount="1e308")
    combo = make_asset("combo", components=["first", "second", "refund"])
    overflow = make_asset("overflow", components=["huge", "huge"])

    assert aggregate_amount(combo, [first, second, refund, combo]) == ""
    assert aggregate_amount(overflow, [huge, overflow]) == ""
