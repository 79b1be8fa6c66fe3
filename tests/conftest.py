import math
import pytest

from pks.engine import Engine
from pks.registry import QuantityRegistry

# Reference trajectory: v = 20 m/s at 45°, a = -10 m/s^2 on level ground.
V, ACC_G, THETA_DEG = 20.0, -10.0, 45.0
TRUTH = {
    "initial_speed": V,
    "final_speed": V,
    "acc": ACC_G,
    "time": 2 * V * math.sin(math.radians(THETA_DEG)) / -ACC_G,
    "range": V ** 2 * math.sin(math.radians(2 * THETA_DEG)) / -ACC_G,
    "max_height": (V * math.sin(math.radians(THETA_DEG))) ** 2 / (2 * -ACC_G),
}


@pytest.fixture(scope="session")
def registry():
    return QuantityRegistry.default()


@pytest.fixture
def engine(registry):
    return Engine(registry)


@pytest.fixture
def qset(registry):
    return registry.new_set()
