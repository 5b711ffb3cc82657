import pytest

from ledger.service import RewardLedger
from ledger.tests.helpers import make_ledger


@pytest.fixture
def ledger() -> RewardLedger:
    return make_ledger()
