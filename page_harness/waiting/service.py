"""Timeout-bounded polling for DOM content."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, TypeVar

from page_harness.config import CONFIG
from page_harness.exceptions import WaitTimeoutError
from page_harness.waiting.views import ElementSnapshot, PollSession

if TYPE_CHECKING:
	from page_harness.page.views import PageSession

logger = logging.getLogger(__name__)

T = TypeVar('T')

# Visibility follows the usual automation definition: a non-empty box and not visibility:hidden
ELEMENT_SNAPSHOT_JS = """(selector) => {
	const element = document.querySelector(selector);
	if (element === null) return {exists: false, visible: false, textContent: null, innerText: null};
	const style = window.getComputedStyle(element);
	const rect = element.getBoundingClientRect();
	const visible = style.visibility !== 'hidden' && rect.width > 0 && rect.height > 0;
	return {exists: true, visible: visible, textContent: element.textContent, innerText: element.innerText};
}"""


def _is_visible(snapshot: ElementSnapshot) -> bool:
	return snapshot.exists and snapshot.visible


def _is_present(snapshot: ElementSnapshot) -> bool:
	return snapshot.exists


def _check_timeout(timeout: float) -> float:
	if timeout < 0:
		raise ValueError(f'timeout must not be negative, got {timeout}')
	return timeout


class PollingWaiter:
	"""Waits for page-observable element state by re-checking it at a fixed interval.

	Each check is one ``evaluate`` round trip returning an
	:class:`ElementSnapshot`; the page keeps running between checks. A check
	that fails (the page may be mid-navigation or re-rendering) counts as
	"not yet" and is retried.

	Every wait first requires the element to exist and be visible, then
	checks its content. Both phases share one deadline. When it passes, the
	pending round trip is cancelled and :class:`WaitTimeoutError` is raised.
	"""

	def __init__(self, page: 'PageSession', timeout: float | None = None, polling_interval: float | None = None):
		self.page = page
		self.timeout = _check_timeout(CONFIG.PAGE_HARNESS_DEFAULT_TIMEOUT if timeout is None else timeout)
		self.polling_interval = CONFIG.PAGE_HARNESS_POLLING_INTERVAL if polling_interval is None else polling_interval
		if self.polling_interval <= 0:
			raise ValueError(f'polling_interval must be positive, got {self.polling_interval}')

	async def snapshot(self, selector: str) -> ElementSnapshot:
		raw = await self.page.evaluate(ELEMENT_SNAPSHOT_JS, selector)
		return ElementSnapshot.model_validate(raw or {})

	async def wait_for_selector(self, selector: str, visible: bool = True, timeout: float | None = None) -> ElementSnapshot:
		session = self._new_session(selector, f'{selector!r} to be {"visible" if visible else "present"}', timeout)
		return await self._run(session, self._poll(session, _is_visible if visible else _is_present, phase='visible'))

	async def wait_for_content(self, selector: str, timeout: float | None = None) -> str:
		"""Wait until the element is visible and has non-empty text. Returns its rendered text."""
		session = self._new_session(selector, f'{selector!r} to have content', timeout, expected='<non-empty>')

		async def _wait() -> str:
			await self._poll(session, _is_visible, phase='visible')
			snapshot = await self._poll(session, lambda s: s.exists and bool(s.text_content), phase='content')
			return snapshot.inner_text or ''

		return await self._run(session, _wait())

	async def wait_for_content_to_change(self, selector: str, current_content: str, timeout: float | None = None) -> str:
		"""Wait until the element's text differs from ``current_content``. Returns the new rendered text.

		Content that changes and changes back between two checks looks unchanged.
		"""
		session = self._new_session(
			selector, f'content of {selector!r} to change', timeout, expected=f'anything but {current_content!r}'
		)

		async def _wait() -> str:
			await self._poll(session, _is_visible, phase='visible')
			snapshot = await self._poll(session, lambda s: s.exists and s.text_content != current_content, phase='content')
			return snapshot.inner_text or ''

		return await self._run(session, _wait())

	async def wait_for_content_to_become(self, selector: str, target_content: str, timeout: float | None = None) -> str:
		"""Wait until the element's rendered text equals ``target_content``."""
		session = self._new_session(selector, f'content of {selector!r} to become {target_content!r}', timeout, expected=target_content)
		session.observed_field = 'inner_text'

		async def _wait() -> str:
			await self._poll(session, _is_visible, phase='visible')
			snapshot = await self._poll(session, lambda s: s.exists and s.inner_text == target_content, phase='content')
			return snapshot.inner_text or ''

		return await self._run(session, _wait())

	def _new_session(self, selector: str, description: str, timeout: float | None, expected: str | None = None) -> PollSession:
		return PollSession(
			selector=selector,
			description=description,
			interval=self.polling_interval,
			timeout=self.timeout if timeout is None else _check_timeout(timeout),
			expected=expected,
		)

	async def _poll(
		self, session: PollSession, condition: Callable[[ElementSnapshot], bool], phase: str
	) -> ElementSnapshot:
		session.phase = phase
		while True:
			session.attempts += 1
			try:
				snapshot = await self.snapshot(session.selector)
			except Exception as e:
				session.last_error = f'{type(e).__name__}: {e}'
				logger.debug(f'Poll #{session.attempts} for {session.description} failed: {session.last_error}')
			else:
				session.last_snapshot = snapshot
				if condition(snapshot):
					return snapshot
			await asyncio.sleep(session.interval)

	async def _run(self, session: PollSession, waiting: Awaitable[T]) -> T:
		try:
			async with asyncio.timeout(session.timeout):
				return await self.page.watch(waiting)
		except TimeoutError as e:
			logger.debug(f'Gave up on {session.description} after {session.attempts} poll(s)')
			raise WaitTimeoutError(
				selector=session.selector,
				description=session.description,
				timeout=session.timeout,
				phase=session.phase,
				expected=session.expected,
				observed=session.observed,
				last_error=session.last_error,
			) from e


async def wait_for_selector(page: 'PageSession', selector: str, visible: bool = True, timeout: float | None = None) -> ElementSnapshot:
	return await PollingWaiter(page, timeout=timeout).wait_for_selector(selector, visible=visible)


async def wait_for_content(page: 'PageSession', selector: str, timeout: float | None = None) -> str:
	return await PollingWaiter(page, timeout=timeout).wait_for_content(selector)


async def wait_for_content_to_change(
	page: 'PageSession', selector: str, current_content: str, timeout: float | None = None
) -> str:
	return await PollingWaiter(page, timeout=timeout).wait_for_content_to_change(selector, current_content)


async def wait_for_content_to_become(
	page: 'PageSession', selector: str, target_content: str, timeout: float | None = None
) -> str:
	return await PollingWaiter(page, timeout=timeout).wait_for_content_to_become(selector, target_content)
