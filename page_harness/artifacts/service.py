"""Where tests read fixture notebooks from and write their artifacts to."""

import logging
import os
import time
from pathlib import Path
from typing import TYPE_CHECKING

from page_harness.config import CONFIG

if TYPE_CHECKING:
	from page_harness.page.views import PageSession

logger = logging.getLogger(__name__)


def get_fixtures_dir() -> Path:
	return CONFIG.PAGE_HARNESS_FIXTURES_DIR or Path.cwd() / 'tests' / 'fixtures'


def get_artifacts_dir() -> Path:
	return CONFIG.PAGE_HARNESS_ARTIFACTS_DIR or Path.cwd() / 'tests' / 'artifacts'


def current_test_name() -> str:
	"""Name of the running pytest test with spaces replaced by underscores.

	``PYTEST_CURRENT_TEST`` looks like ``tests/test_x.py::TestX::test_y (call)``;
	only the part after the module is kept.
	"""
	node_id = os.getenv('PYTEST_CURRENT_TEST', '')
	if not node_id:
		return 'unknown_test'
	node_id = node_id.rsplit(' (', 1)[0]
	name = node_id.split('::', 1)[1] if '::' in node_id else node_id
	return name.replace('::', '.').replace(' ', '_')


def get_fixture_notebook_path(name: str) -> Path:
	return get_fixtures_dir() / name


def get_temporary_notebook_path() -> Path:
	return get_artifacts_dir() / f'temporary_notebook_{current_test_name()}_{_timestamp_ms()}.jl'


def get_test_screenshot_path() -> Path:
	return get_artifacts_dir() / f'screenshot_{current_test_name()}_{_timestamp_ms()}.png'


async def save_screenshot(page: 'PageSession', screenshot_path: str | Path) -> Path:
	screenshot_path = Path(screenshot_path)
	# test names may contain slashes, which turn into subdirectories
	screenshot_path.parent.mkdir(parents=True, exist_ok=True)
	await page.screenshot(str(screenshot_path))
	logger.debug(f'📸 Saved screenshot to {screenshot_path}')
	return screenshot_path


def _timestamp_ms() -> int:
	return int(time.time() * 1000)
