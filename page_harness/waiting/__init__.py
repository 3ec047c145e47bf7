"""Polling waits for DOM content."""

from page_harness.waiting.service import (
	PollingWaiter,
	wait_for_content,
	wait_for_content_to_become,
	wait_for_content_to_change,
	wait_for_selector,
)
from page_harness.waiting.views import ElementSnapshot, PollSession

__all__ = [
	'ElementSnapshot',
	'PollSession',
	'PollingWaiter',
	'wait_for_content',
	'wait_for_content_to_become',
	'wait_for_content_to_change',
	'wait_for_selector',
]
