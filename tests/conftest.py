"""Pytest configuration and fixtures."""

import pytest

from tests._harness import e2e_enabled, start_harness


@pytest.fixture(scope="module")
def h():
	"""Fixture pages and a server command line; needs BROWSER_ASSERT_E2E=1 and `playwright install chromium`."""
	if not e2e_enabled():
		pytest.skip("set BROWSER_ASSERT_E2E=1 to run end-to-end tests")
	with start_harness() as harness:
		yield harness
