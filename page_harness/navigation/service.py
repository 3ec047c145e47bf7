"""Navigation guard: run an action that navigates, wait for the page to settle, report leaks."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any

from page_harness.exceptions import NavigationSettleWarning
from page_harness.navigation.views import NavigationReport
from page_harness.tracking.service import RequestTracker

if TYPE_CHECKING:
	from page_harness.page.views import PageSession, WaitUntil

logger = logging.getLogger(__name__)


class NavigationGuard:
	"""Wraps an action that is expected to trigger a full-page navigation.

	The navigation-completion wait is registered before the action runs, so a
	navigation faster than the test code is still observed. If the wait
	fails or times out the guard only logs a :class:`NavigationSettleWarning`;
	a failure of the action itself propagates. Requests still open once the
	page settled are logged, not treated as errors (kept-alive connections
	routinely outlive a navigation).
	"""

	def __init__(self, page: 'PageSession', wait_until: 'WaitUntil' = 'networkidle0', timeout: float | None = None):
		self.page = page
		self.wait_until = wait_until
		self.timeout = timeout

	async def run(self, action: Callable[[], Awaitable[Any]]) -> NavigationReport:
		return await self.page.watch(self._guard(action))

	async def _guard(self, action: Callable[[], Awaitable[Any]]) -> NavigationReport:
		loop = asyncio.get_running_loop()
		start_time = loop.time()
		tracker = RequestTracker(self.page)
		settle_warning: NavigationSettleWarning | None = None

		try:
			with tracker:
				navigation = self.page.wait_for_navigation(wait_until=self.wait_until, timeout=self.timeout)
				try:
					await action()
				except BaseException:
					_discard(navigation)
					raise

				try:
					await navigation
				except Exception as e:
					settle_warning = NavigationSettleWarning(e)
					logger.warning(f'⚠️ {settle_warning}')
		finally:
			inflight_urls = tracker.inflight_urls()
			if inflight_urls:
				logger.warning(f'Open connections: {inflight_urls}')

		return NavigationReport(
			settled=settle_warning is None,
			warning=str(settle_warning) if settle_warning else None,
			inflight_urls=inflight_urls,
			elapsed_time=loop.time() - start_time,
		)


def _discard(navigation: Awaitable[None]) -> None:
	"""Cancel a navigation wait nobody will await any more."""
	future = asyncio.ensure_future(navigation)
	if future.done():
		if not future.cancelled():
			future.exception()
	else:
		future.cancel()


async def click_and_wait_for_navigation(
	page: 'PageSession', selector: str, wait_until: 'WaitUntil' = 'networkidle0', timeout: float | None = None
) -> NavigationReport:
	"""Click ``selector`` and wait for the navigation it triggers to go network-idle."""
	return await NavigationGuard(page, wait_until=wait_until, timeout=timeout).run(lambda: page.click(selector))
