"""
Fake implementations for testing.

This package contains fake (test double) implementations of core interfaces,
following the "fakes over mocks" philosophy. Fakes are simplified working
implementations that behave like real components but avoid external dependencies.

Key fakes:
- ScriptedProvider: Completion provider with scripted answers (no network)

Philosophy:
- Fakes implement the same interface as real components
- Fakes use simplified logic but real data structures
- Tests using fakes are fast, deterministic, and maintainable
- Fakes survive refactoring better than mocks
"""

from tests.fakes.completion import ScriptedProvider

__all__ = [
    "ScriptedProvider",
]
