"""Deterministic waiting, request tracking and event policy for browser tests of a notebook app."""

from page_harness.exceptions import (
	ApplicationErrorDetected,
	ElementNotFoundError,
	NavigationSettleWarning,
	PageEvaluationError,
	PageHarnessError,
	WaitTimeoutError,
)
from page_harness.navigation import NavigationGuard, NavigationReport, click_and_wait_for_navigation
from page_harness.page import CDPPage, EventEmitter, PageEvent, PageSession
from page_harness.policy import PageEventPolicy, setup_page
from page_harness.tracking import RequestTracker
from page_harness.waiting import (
	PollingWaiter,
	wait_for_content,
	wait_for_content_to_become,
	wait_for_content_to_change,
	wait_for_selector,
)

__all__ = [
	'ApplicationErrorDetected',
	'CDPPage',
	'ElementNotFoundError',
	'EventEmitter',
	'NavigationGuard',
	'NavigationReport',
	'NavigationSettleWarning',
	'PageEvaluationError',
	'PageEvent',
	'PageEventPolicy',
	'PageHarnessError',
	'PageSession',
	'PollingWaiter',
	'RequestTracker',
	'WaitTimeoutError',
	'click_and_wait_for_navigation',
	'setup_page',
	'wait_for_content',
	'wait_for_content_to_become',
	'wait_for_content_to_change',
	'wait_for_selector',
]
