"""Fixtures shared by the cvgrab suites."""

import pytest

from cvgrab.tests.fakes import FakeWriter, make_frame


@pytest.fixture(autouse=True)
def _reset_fake_writers():
    FakeWriter.instances.clear()
    yield
    FakeWriter.instances.clear()


@pytest.fixture
def frame():
    return make_frame()
