"""Types exchanged with a controlled browser page."""

from collections.abc import Awaitable, Callable
from enum import Enum
from typing import Any, Literal, Protocol, TypeVar

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar('T')

WaitUntil = Literal['load', 'domcontentloaded', 'networkidle0', 'networkidle2']


class PageEvent(str, Enum):
	"""Event channels a page session emits."""

	REQUEST = 'request'
	REQUEST_FINISHED = 'requestfinished'
	REQUEST_FAILED = 'requestfailed'
	REQUEST_INTERCEPTED = 'requestintercepted'
	DIALOG = 'dialog'
	CONSOLE = 'console'


class NetworkRequest:
	"""Handle for one network exchange.

	Compared and hashed by identity: two handles for the same URL are still
	two requests.
	"""

	def __init__(self, request_id: str, url: str, method: str = 'GET', resource_type: str | None = None):
		self.request_id = request_id
		self.url = url
		self.method = method
		self.resource_type = resource_type
		self.failure: str | None = None

	def __repr__(self) -> str:
		return f'NetworkRequest({self.method} {self.url})'


class InterceptedRequest:
	"""A paused request that must be either aborted or continued exactly once."""

	def __init__(
		self,
		url: str,
		on_abort: Callable[[str], Awaitable[None]],
		on_continue: Callable[[], Awaitable[None]],
		method: str = 'GET',
		resource_type: str | None = None,
	):
		self.url = url
		self.method = method
		self.resource_type = resource_type
		self.handled = False
		self._on_abort = on_abort
		self._on_continue = on_continue

	async def abort(self, error_reason: str = 'Failed') -> None:
		self._mark_handled()
		await self._on_abort(error_reason)

	async def continue_(self) -> None:
		self._mark_handled()
		await self._on_continue()

	def _mark_handled(self) -> None:
		if self.handled:
			raise RuntimeError(f'Request is already handled: {self.url}')
		self.handled = True

	def __repr__(self) -> str:
		return f'InterceptedRequest({self.method} {self.url})'


class JavaScriptDialog:
	"""A native dialog (alert, confirm, prompt, beforeunload) opened by the page."""

	def __init__(
		self,
		type: str,
		message: str,
		on_accept: Callable[[str | None], Awaitable[None]],
		on_dismiss: Callable[[], Awaitable[None]],
		default_value: str = '',
	):
		self.type = type
		self.message = message
		self.default_value = default_value
		self.handled = False
		self._on_accept = on_accept
		self._on_dismiss = on_dismiss

	async def accept(self, prompt_text: str | None = None) -> None:
		self._mark_handled()
		await self._on_accept(prompt_text)

	async def dismiss(self) -> None:
		self._mark_handled()
		await self._on_dismiss()

	def _mark_handled(self) -> None:
		if self.handled:
			raise RuntimeError(f'Cannot handle a {self.type} dialog which is already handled')
		self.handled = True

	def __repr__(self) -> str:
		return f'JavaScriptDialog({self.type}: {self.message!r})'


class ConsoleMessage(BaseModel):
	"""A console API call made by the page."""

	model_config = ConfigDict(extra='forbid', frozen=True)

	type: str = Field(description="Console method, e.g. 'log', 'error', 'warning'")
	text: str = Field(description='Arguments rendered and joined with spaces')
	url: str | None = None


class PageSession(Protocol):
	"""What the harness needs from a controlled browser page."""

	fatal_error: BaseException | None
	fatal_error_reported: bool

	def on(self, event: PageEvent | str, handler: Callable[..., Any]) -> None: ...

	def remove_listener(self, event: PageEvent | str, handler: Callable[..., Any]) -> None: ...

	async def watch(self, awaitable: Awaitable[T]) -> T: ...

	def raise_if_failed(self) -> None: ...

	async def evaluate(self, page_function: str, *args: Any) -> Any: ...

	async def click(self, selector: str) -> None: ...

	async def screenshot(self, path: str) -> None: ...

	def wait_for_navigation(self, wait_until: WaitUntil = 'networkidle0', timeout: float | None = None) -> Awaitable[None]: ...

	async def set_request_interception(self, enabled: bool) -> None: ...
