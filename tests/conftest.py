"""
Pytest configuration and shared fixtures.
"""

import sys
from pathlib import Path

import pytest

# Add the repository root to the path so absolute imports work
# (tests/ is inside the repository, so parent is the root)
repo_root = Path(__file__).parent.parent
if str(repo_root) not in sys.path:
    sys.path.insert(0, str(repo_root))

from primitives.merkle_sum_tree import MerkleSumTree  # noqa: E402

TEST_DATA_DIR = Path(__file__).parent / "test-data"

# Sum of the balances in entry_16.csv
ENTRY_16_TOTAL = 556862
# Same ledger with the first balance replaced by 2^64
ENTRY_16_BIGINTS_TOTAL = 18446744073710096590


@pytest.fixture(scope="session")
def entry_16_csv() -> Path:
    return TEST_DATA_DIR / "entry_16.csv"


@pytest.fixture(scope="session")
def entry_16_bigints_csv() -> Path:
    return TEST_DATA_DIR / "entry_16_bigints.csv"


@pytest.fixture(scope="session")
def tree_16(entry_16_csv) -> MerkleSumTree:
    return MerkleSumTree.from_csv(entry_16_csv)


@pytest.fixture(scope="session")
def tree_16_bigints(entry_16_bigints_csv) -> MerkleSumTree:
    return MerkleSumTree.from_csv(entry_16_bigints_csv)
