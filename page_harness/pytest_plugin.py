"""pytest plugin: a fatal page error fails the test it happened in.

Loaded automatically through the ``pytest11`` entry point (named after this
module, so ``-p page_harness.pytest_plugin`` is safe alongside it) once page_harness
is installed. Without the entry point, list it in a ``conftest.py``::

	pytest_plugins = ['page_harness.pytest_plugin']
"""

import pytest

from page_harness.policy.service import raise_unreported_page_errors


@pytest.hookimpl(wrapper=True)
def pytest_runtest_call(item: pytest.Item):
	result = yield
	# the test body passed; an error nothing awaited still fails it
	raise_unreported_page_errors()
	return result
