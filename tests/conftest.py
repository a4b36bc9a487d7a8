"""Shared pytest fixtures for the revision-manager test suite.

Factory helpers live in ``tests.fixtures.certificates``. No external service
dependencies are required for unit tests.
"""

from __future__ import annotations

import pytest

from tests.fixtures.certificates import make_certificate


@pytest.fixture()
def sample_certificate():
    """A Ready Certificate with no revision history limit."""
    return make_certificate()
