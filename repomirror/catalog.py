"""
Catalog of the Noir repositories repomirror knows how to mirror.

Two entries take their tag from the environment: the `noir` compiler
repository (NOIR_DEFAULT_VERSION, overridable per sync run) and the
`bb.js` bindings (BB_DEFAULT_VERSION). Both are read once at import.
"""

import os
from typing import List, Optional, Iterable

from .domain.pin import Category, RepositoryPin

NOIR_REPO = "noir"
BB_REPO = "bb.js"
EXAMPLES_REPO = "noir-examples"

DEFAULT_NOIR_VERSION = os.environ.get("NOIR_DEFAULT_VERSION") or "v1.0.0-beta.18"
DEFAULT_BB_VERSION = os.environ.get("BB_DEFAULT_VERSION") or "v3.0.0-nightly.20260102"

# Version tags are attached by get_pins()
BASE_PINS = (
    # --- Core ---
    RepositoryPin(
        name=NOIR_REPO,
        url="https://github.com/noir-lang/noir",
        branch="master",
        sparse=("docs", "noir_stdlib", "tooling", "examples"),
        description="Noir language compiler, standard library, tooling, and documentation",
        category=Category.CORE,
    ),
    RepositoryPin(
        name=EXAMPLES_REPO,
        url="https://github.com/noir-lang/noir-examples",
        branch="master",
        description="Official Noir example circuits and projects",
        category=Category.CORE,
    ),

    # --- Libraries ---
    RepositoryPin(
        name="noir-bignum",
        url="https://github.com/noir-lang/noir-bignum",
        branch="main",
        description="Big integer arithmetic, foundational for most crypto operations",
        category=Category.LIBRARIES,
    ),
    RepositoryPin(
        name="noir_bigcurve",
        url="https://github.com/noir-lang/noir_bigcurve",
        branch="main",
        description="Elliptic curve operations over arbitrary prime fields",
        category=Category.LIBRARIES,
    ),
    RepositoryPin(
        name="noir_json_parser",
        url="https://github.com/noir-lang/noir_json_parser",
        branch="main",
        description="JSON string parsing (RFC 8259) in Noir",
        category=Category.LIBRARIES,
    ),
    RepositoryPin(
        name="noir_string_search",
        url="https://github.com/noir-lang/noir_string_search",
        branch="main",
        description="Substring search and proof in Noir",
        category=Category.LIBRARIES,
    ),
    RepositoryPin(
        name="noir_sort",
        url="https://github.com/noir-lang/noir_sort",
        branch="main",
        description="Array sorting in Noir",
        category=Category.LIBRARIES,
    ),
    RepositoryPin(
        name="poseidon",
        url="https://github.com/noir-lang/poseidon",
        branch="master",
        description="Poseidon hash function implementation for Noir",
        category=Category.LIBRARIES,
    ),
    RepositoryPin(
        name="sparse_array",
        url="https://github.com/noir-lang/sparse_array",
        branch="master",
        description="Sparse array implementation for Noir",
        category=Category.LIBRARIES,
    ),
    RepositoryPin(
        name="zk-kit.noir",
        url="https://github.com/privacy-scaling-explorations/zk-kit.noir",
        branch="main",
        description="Algorithm & utility collection (Merkle trees, ECDH, etc.) for Noir",
        category=Category.LIBRARIES,
    ),
    RepositoryPin(
        name=BB_REPO,
        url="https://github.com/AztecProtocol/aztec-packages",
        branch="next",
        sparse=("barretenberg/ts",),
        description="Aztec Barretenberg TypeScript/JavaScript bindings for proving backends",
        category=Category.LIBRARIES,
    ),

    # --- Reference ---
    RepositoryPin(
        name="awesome-noir",
        url="https://github.com/noir-lang/awesome-noir",
        branch="main",
        description="Curated ecosystem index, searchable for finding libraries & projects",
        category=Category.REFERENCE,
    ),
)


def get_pins(version: Optional[str] = None) -> List[RepositoryPin]:
    """
    Get the pin table with version tags applied.

    Args:
        version: Tag for the noir repository (defaults to DEFAULT_NOIR_VERSION)

    Returns:
        Pins in catalog order
    """
    noir_tag = version or DEFAULT_NOIR_VERSION
    pins = []
    for pin in BASE_PINS:
        if pin.name == NOIR_REPO:
            pins.append(pin.with_tag(noir_tag))
        elif pin.name == BB_REPO:
            pins.append(pin.with_tag(DEFAULT_BB_VERSION))
        else:
            pins.append(pin)
    return pins


def get_pin(name: str, version: Optional[str] = None) -> Optional[RepositoryPin]:
    """Get a pin by name, or None if it is not in the catalog."""
    for pin in get_pins(version):
        if pin.name == name:
            return pin
    return None


def get_pins_by_category(category: Category, version: Optional[str] = None) -> List[RepositoryPin]:
    return [pin for pin in get_pins(version) if pin.category == category]


def get_repo_names() -> List[str]:
    return [pin.name for pin in BASE_PINS]


def get_category_names() -> List[str]:
    return [c.value for c in Category]


def select_pins(
    pins: Iterable[RepositoryPin],
    names: Iterable[str] = (),
    categories: Iterable[Category] = (),
) -> List[RepositoryPin]:
    """
    Filter pins by explicit names, else by categories, else to core.

    Names win over categories when both are given.
    """
    pins = list(pins)
    names = list(names)
    categories = list(categories)

    if names:
        return [pin for pin in pins if pin.name in names]
    if categories:
        return [pin for pin in pins if pin.category in categories]
    return [pin for pin in pins if pin.category == Category.CORE]
