"""Fixture and artifact locations for browser tests."""

from page_harness.artifacts.service import (
	current_test_name,
	get_artifacts_dir,
	get_fixture_notebook_path,
	get_fixtures_dir,
	get_temporary_notebook_path,
	get_test_screenshot_path,
	save_screenshot,
)

__all__ = [
	'current_test_name',
	'get_artifacts_dir',
	'get_fixture_notebook_path',
	'get_fixtures_dir',
	'get_temporary_notebook_path',
	'get_test_screenshot_path',
	'save_screenshot',
]
