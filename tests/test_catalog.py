"""
Tests for the repository catalog and pin selection.
"""

from repomirror import catalog
from repomirror.catalog import (
    BASE_PINS, BB_REPO, NOIR_REPO, get_pin, get_pins, get_pins_by_category,
    get_repo_names, select_pins,
)
from repomirror.domain import Category, RefKind


class TestCatalog:
    def test_names_are_unique(self):
        names = get_repo_names()
        assert len(names) == len(set(names))

    def test_every_category_is_represented(self):
        categories = {pin.category for pin in BASE_PINS}
        assert categories == set(Category)

    def test_noir_gets_default_version(self):
        noir = get_pin(NOIR_REPO)
        assert noir.tag == catalog.DEFAULT_NOIR_VERSION
        assert noir.ref_spec.kind == RefKind.TAG
        assert noir.is_sparse

    def test_version_override_only_affects_noir(self):
        pins = {p.name: p for p in get_pins("v1.0.0-beta.3")}
        assert pins[NOIR_REPO].tag == "v1.0.0-beta.3"
        assert pins[BB_REPO].tag == catalog.DEFAULT_BB_VERSION
        assert pins["noir-bignum"].tag is None

    def test_base_pins_are_not_mutated(self):
        get_pins("v9")
        base_noir = next(p for p in BASE_PINS if p.name == NOIR_REPO)
        assert base_noir.tag is None

    def test_get_pin_unknown(self):
        assert get_pin("does-not-exist") is None

    def test_get_pins_by_category(self):
        core = get_pins_by_category(Category.CORE)
        assert {p.name for p in core} == {NOIR_REPO, catalog.EXAMPLES_REPO}


class TestSelectPins:
    def test_default_is_core(self):
        selected = select_pins(get_pins())
        assert all(p.category == Category.CORE for p in selected)
        assert selected

    def test_names_win_over_categories(self):
        selected = select_pins(get_pins(), names=["poseidon"], categories=[Category.CORE])
        assert [p.name for p in selected] == ["poseidon"]

    def test_categories(self):
        selected = select_pins(get_pins(), categories=[Category.REFERENCE])
        assert [p.name for p in selected] == ["awesome-noir"]

    def test_unknown_names_select_nothing(self):
        assert select_pins(get_pins(), names=["nope"]) == []

    def test_catalog_order_is_kept(self):
        selected = select_pins(get_pins(), names=["poseidon", "noir-bignum"])
        assert [p.name for p in selected] == ["noir-bignum", "poseidon"]
