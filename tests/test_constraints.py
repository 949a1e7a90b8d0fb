import pytest

from loadoutforge.domain.constraints import (
    DEFAULT_RULES,
    UNCONSTRAINED,
    Exact,
    QuotaConfig,
    Unconstrained,
    effective_cap,
    find_rule,
)


def test_exact_accepts_counts_within_loadout():
    assert Exact(0).count == 0
    assert Exact(4).count == 4


@pytest.mark.parametrize("count", [-1, 5])
def test_exact_rejects_out_of_range(count):
    with pytest.raises(ValueError):
        Exact(count)


@pytest.mark.parametrize("count", [True, 1.5, "2"])
def test_exact_rejects_non_integers(count):
    with pytest.raises(TypeError):
        Exact(count)


def test_missing_category_reads_as_unconstrained():
    quotas = QuotaConfig(quotas={})
    assert isinstance(quotas.get("orbital"), Unconstrained)


def test_pinned_total_and_items():
    quotas = QuotaConfig.pinned(orbital=2, eagle=1)
    assert quotas.pinned_total() == 3
    assert dict(quotas.pinned_items()) == {"orbital": Exact(2), "eagle": Exact(1)}


def test_with_quota_returns_new_config():
    quotas = QuotaConfig.unconstrained()
    updated = quotas.with_quota("sentry", Exact(1))
    assert quotas.get("sentry") is UNCONSTRAINED
    assert updated.get("sentry") == Exact(1)


def test_effective_cap_prefers_pin_over_rule():
    quotas = QuotaConfig(quotas={"backpack": Exact(2)})
    assert effective_cap("backpack", quotas, DEFAULT_RULES) == 2


def test_effective_cap_uses_active_rule():
    assert effective_cap("backpack", QuotaConfig.unconstrained(), DEFAULT_RULES) == 1
    assert effective_cap("backpack", QuotaConfig.unconstrained(), frozenset()) is None


def test_effective_cap_uncapped_category():
    assert effective_cap("eagle", QuotaConfig.unconstrained(), DEFAULT_RULES) is None


def test_find_rule():
    rule = find_rule("no_double_backpack")
    assert rule is not None and rule.max_count == 1
    assert find_rule("missing") is None
