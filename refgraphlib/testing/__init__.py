"""Testing utilities for RefGraphLib.

This module provides fixtures and helpers for testing code that uses
RefGraphLib, without requiring real repositories.
"""

from .fixtures import (
    InMemoryModel,
    FakeScmPlugin,
    FakeReferenceManager,
    ScriptedUserInteraction,
    CommitRecord,
    UpdateRecord,
    make_context,
)

__all__ = [
    'InMemoryModel',
    'FakeScmPlugin',
    'FakeReferenceManager',
    'ScriptedUserInteraction',
    'CommitRecord',
    'UpdateRecord',
    'make_context',
]
