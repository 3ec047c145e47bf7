"""Configuration for page_harness, read lazily from the environment."""

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

TRUTHY_VALUES = ('true', '1')


def parse_bool_env(value: str | None) -> bool:
	"""Parse a boolean-like environment value. Only "true" and "1" count as truthy (case-insensitive)."""
	if value is None:
		return False
	return value.strip().lower() in TRUTHY_VALUES


class Config:
	"""Environment-backed settings.

	Every property re-reads the environment on access, so tests can patch
	variables with ``monkeypatch.setenv`` without reloading the module.
	"""

	@property
	def PLUTO_TEST_OFFLINE(self) -> bool:
		return parse_bool_env(os.getenv('PLUTO_TEST_OFFLINE', 'false'))

	@property
	def PAGE_HARNESS_DEFAULT_TIMEOUT(self) -> float:
		return float(os.getenv('PAGE_HARNESS_DEFAULT_TIMEOUT', '30'))

	@property
	def PAGE_HARNESS_POLLING_INTERVAL(self) -> float:
		return float(os.getenv('PAGE_HARNESS_POLLING_INTERVAL', '0.1'))

	@property
	def PAGE_HARNESS_NAVIGATION_TIMEOUT(self) -> float:
		return float(os.getenv('PAGE_HARNESS_NAVIGATION_TIMEOUT', '30'))

	@property
	def PAGE_HARNESS_LOGGING_LEVEL(self) -> str:
		return os.getenv('PAGE_HARNESS_LOGGING_LEVEL', 'info').lower()

	@property
	def PAGE_HARNESS_ARTIFACTS_DIR(self) -> Path | None:
		value = os.getenv('PAGE_HARNESS_ARTIFACTS_DIR')
		return Path(value).expanduser() if value else None

	@property
	def PAGE_HARNESS_FIXTURES_DIR(self) -> Path | None:
		value = os.getenv('PAGE_HARNESS_FIXTURES_DIR')
		return Path(value).expanduser() if value else None


CONFIG = Config()
