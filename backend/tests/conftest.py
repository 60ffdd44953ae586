"""
Shared fixtures for the engine tests.
"""

import pytest

from cyberwar.core import CombatResolver, GameConfig, load_catalog, new_game_state


@pytest.fixture
def catalog():
    return load_catalog()


@pytest.fixture
def resolver(catalog):
    return CombatResolver(catalog)


@pytest.fixture
def no_decay():
    """Config without end-of-ply decay, so post-move levels are exact"""
    return GameConfig(security_decay=0.0)


@pytest.fixture
def state(catalog):
    return new_game_state(GameConfig(), catalog)
