"""
Shared fixtures for the RefGraphLib test suite.
"""

import pytest

from refgraphlib.testing import InMemoryModel, make_context


@pytest.fixture
def model():
    """Small classification tree used by most reference-graph tests.

    Domain/
        a, b, c, d
    Lib/
        core, util
    App/
        web
    """
    return InMemoryModel({
        "Domain": {"a": None, "b": None, "c": None, "d": None},
        "Lib": {"core": None, "util": None},
        "App": {"web": None},
    })


@pytest.fixture
def context(model):
    return make_context(model)
