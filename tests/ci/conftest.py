"""Shared fixtures: an in-memory page session that honours the PageSession contract."""

import asyncio
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import pytest

from page_harness.exceptions import ElementNotFoundError
from page_harness.logging_config import setup_logging
from page_harness.page.events import EventEmitter
from page_harness.page.views import NetworkRequest, PageEvent
from page_harness.waiting.service import ELEMENT_SNAPSHOT_JS

setup_logging('debug')


@dataclass
class FakeElement:
	text_content: str
	inner_text: str
	visible: bool = True


class FakePage(EventEmitter):
	"""Page session whose DOM is a dict of selector -> FakeElement.

	Only the snapshot script used by the waiters is understood natively;
	other scripts can be answered through ``scripts``.
	"""

	def __init__(self):
		super().__init__()
		self.elements: dict[str, FakeElement] = {}
		self.scripts: dict[str, Callable[..., Any]] = {}
		self.click_handlers: dict[str, Callable[[], Any]] = {}
		self.evaluations: list[tuple[str, tuple]] = []
		self.clicks: list[str] = []
		self.navigation_waits: list[tuple[asyncio.Future, str, float | None]] = []
		self.interception_enabled = False
		self.screenshots: list[str] = []
		self.failing_evaluations = 0
		self._request_count = 0

	def set_text(self, selector: str, text: str, inner_text: str | None = None, visible: bool = True) -> None:
		self.elements[selector] = FakeElement(text, text if inner_text is None else inner_text, visible)

	def remove(self, selector: str) -> None:
		self.elements.pop(selector, None)

	def make_request(self, url: str) -> NetworkRequest:
		self._request_count += 1
		return NetworkRequest(request_id=f'req-{self._request_count}', url=url)

	def start_request(self, url: str) -> NetworkRequest:
		request = self.make_request(url)
		self.emit(PageEvent.REQUEST, request)
		return request

	def complete_navigation(self) -> None:
		for future, _, _ in self.navigation_waits:
			if not future.done():
				future.set_result(None)

	async def evaluate(self, page_function: str, *args: Any) -> Any:
		self.raise_if_failed()
		self.evaluations.append((page_function, args))
		await asyncio.sleep(0)

		if self.failing_evaluations:
			self.failing_evaluations -= 1
			raise RuntimeError('Execution context was destroyed, most likely because of a navigation')

		if page_function == ELEMENT_SNAPSHOT_JS:
			element = self.elements.get(args[0])
			if element is None:
				return {'exists': False, 'visible': False, 'textContent': None, 'innerText': None}
			return {
				'exists': True,
				'visible': element.visible,
				'textContent': element.text_content,
				'innerText': element.inner_text,
			}

		if page_function in self.scripts:
			return self.scripts[page_function](*args)
		raise NotImplementedError(page_function)

	async def click(self, selector: str) -> None:
		self.raise_if_failed()
		await asyncio.sleep(0)
		element = self.elements.get(selector)
		if element is None or not element.visible:
			raise ElementNotFoundError(selector)
		self.clicks.append(selector)
		handler = self.click_handlers.get(selector)
		if handler is not None:
			handler()

	async def screenshot(self, path: str) -> None:
		self.screenshots.append(path)
		Path(path).write_bytes(b'\x89PNG fake')

	def wait_for_navigation(self, wait_until: str = 'networkidle0', timeout: float | None = None) -> asyncio.Future:
		loop = asyncio.get_running_loop()
		future = loop.create_future()
		self.navigation_waits.append((future, wait_until, timeout))
		if timeout is not None:

			def _on_timeout() -> None:
				if not future.done():
					future.set_exception(TimeoutError(f'Navigation timeout of {timeout}s exceeded'))

			handle = loop.call_later(timeout, _on_timeout)
			future.add_done_callback(lambda _: handle.cancel())
		return future

	async def set_request_interception(self, enabled: bool) -> None:
		self.interception_enabled = enabled


@pytest.fixture
def page() -> FakePage:
	return FakePage()
