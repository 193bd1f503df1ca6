"""BDD tests for sampling a metrics endpoint."""

import pytest
from pytest_bdd import scenarios

scenarios("sampling.feature")

pytestmark = [
    pytest.mark.tier(2),
    pytest.mark.tra("Core.Store.Sample"),
]
