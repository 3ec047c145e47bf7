"""In-flight request bookkeeping for a page session."""

import logging
from typing import TYPE_CHECKING

from page_harness.page.views import NetworkRequest, PageEvent

if TYPE_CHECKING:
	from page_harness.page.views import PageSession

logger = logging.getLogger(__name__)


class RequestTracker:
	"""Counts in-flight requests on a page between ``attach`` and ``dispose``.

	Requests are keyed by handle identity. A counter is incremented per
	``request`` event and decremented per ``requestfinished`` or
	``requestfailed`` event, so a handle seen starting twice needs two
	settle events. Keys are never removed while the tracker lives.

	Event callbacks mutate the counters without locking. That is only
	correct because page events are delivered one at a time on the event
	loop that also runs the code reading ``inflight()``.

	Use as a context manager to guarantee disposal::

		with RequestTracker(page) as tracker:
			...
		tracker.inflight()
	"""

	def __init__(self, page: 'PageSession | None' = None):
		self._page = page
		self._requests: dict[NetworkRequest, int] = {}
		self._attached = False
		self._disposed = False

	def attach(self, page: 'PageSession | None' = None) -> 'RequestTracker':
		"""Start counting. Requests started before this call are never seen."""
		if self._disposed:
			raise RuntimeError('RequestTracker cannot be re-attached after dispose()')
		if self._attached:
			return self

		self._page = page or self._page
		if self._page is None:
			raise ValueError('RequestTracker needs a page to attach to')

		self._page.on(PageEvent.REQUEST, self.on_started)
		self._page.on(PageEvent.REQUEST_FINISHED, self.on_finished)
		self._page.on(PageEvent.REQUEST_FAILED, self.on_failed)
		self._attached = True
		return self

	def on_started(self, request: NetworkRequest) -> None:
		self._requests[request] = self._requests.get(request, 0) + 1

	def on_finished(self, request: NetworkRequest) -> None:
		self._requests[request] = self._requests.get(request, 0) - 1

	def on_failed(self, request: NetworkRequest) -> None:
		logger.debug(f'Request failed: {request.url} ({request.failure or "no reason given"})')
		# failure settles a request exactly like success
		self.on_finished(request)

	def inflight(self) -> list[NetworkRequest]:
		return [request for request, count in self._requests.items() if count > 0]

	def inflight_urls(self) -> list[str]:
		return [request.url for request in self.inflight()]

	def dispose(self) -> None:
		"""Stop counting. Calling it again is a no-op."""
		if not self._attached or self._disposed:
			return
		assert self._page is not None
		self._page.remove_listener(PageEvent.REQUEST, self.on_started)
		self._page.remove_listener(PageEvent.REQUEST_FINISHED, self.on_finished)
		self._page.remove_listener(PageEvent.REQUEST_FAILED, self.on_failed)
		self._disposed = True
		logger.debug(f'RequestTracker disposed with {len(self.inflight())} request(s) in flight')

	@property
	def disposed(self) -> bool:
		return self._disposed

	def __enter__(self) -> 'RequestTracker':
		return self.attach()

	def __exit__(self, *exc_info: object) -> None:
		self.dispose()
