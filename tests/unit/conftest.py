"""Fixtures for unit tests."""

import pytest

from fakes import Workbench, build_workbench


@pytest.fixture
def bench() -> Workbench:
    """Workflow, query and notification services over in-memory fakes."""
    return build_workbench()
