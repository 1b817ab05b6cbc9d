"""
Golden compile cases from tests/goldens.yaml.
"""

from pathlib import Path

import pytest
from scripts.goldens import check_case, load_goldens

GOLDENS = load_goldens(str(Path(__file__).parent / "goldens.yaml"))


@pytest.mark.parametrize("case", GOLDENS["cases"], ids=lambda c: c["name"])
def test_golden_case(case):
    assert check_case(case) == []
