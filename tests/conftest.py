"""Shared fixtures for deep-filter tests."""

import os
import sys

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from deep_filter import FilterEngine, clear_filter_cache

CUSTOMERS = [
    {"name": "Alfreds Futterkiste", "city": "Berlin"},
    {"name": "Around the Horn", "city": "London"},
    {"name": "Bs Beverages", "city": "London"},
    {"name": "Bolido Comidas preparadas", "city": "Madrid"},
    {"name": "Bon app", "city": "Marseille"},
    {"name": "Bottom-Dollar Marketse", "city": "Tsawassen"},
    {"name": "Cactus Comidas para llevar", "city": "Buenos Aires"},
]

# Two branches: active with a small value, or inactive with a large one.
LOGICAL_DATA = [
    {"id": 1, "active": True, "value": 10},
    {"id": 2, "active": True, "value": 20},
    {"id": 3, "active": False, "value": 40},
    {"id": 4, "active": False, "value": 30},
    {"id": 5, "active": True, "value": 5},
]

USERS = [
    {"name": "Carol", "age": 35, "city": "Berlin"},
    {"name": "alice", "age": None, "city": "Paris"},
    {"name": "Bob", "age": 25, "city": "berlin"},
    {"name": "dave", "city": "Rome"},
    {"name": "Eve", "age": 30, "city": "Paris"},
]


@pytest.fixture
def customers():
    return [dict(c) for c in CUSTOMERS]


@pytest.fixture
def logical_data():
    return [dict(d) for d in LOGICAL_DATA]


@pytest.fixture
def users():
    return [dict(u) for u in USERS]


@pytest.fixture
def engine():
    """Isolated engine with its own caches and monitor."""
    return FilterEngine()


@pytest.fixture(autouse=True)
def _reset_default_engine():
    clear_filter_cache()
    yield
    clear_filter_cache()
