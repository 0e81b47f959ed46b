import os
import sys

import pytest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from kitchen_api import KitchenData


@pytest.fixture(scope="session")
def kitchen_data() -> KitchenData:
    return KitchenData.from_json()
