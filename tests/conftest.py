from typing import Any

import pytest

from tests.helpers.quote_fakes import FixedClock


@pytest.fixture(scope="function")
def clock() -> FixedClock:
    return FixedClock()


@pytest.fixture(scope="function")
def live_payload() -> dict[str, Any]:
    return {
        "success": True,
        "timestamp": 1_735_732_800,
        "source": "USD",
        "quotes": {"USDCHF": 0.9, "USDEUR": 0.95, "USDCZK": 24.1},
    }
