"""Page session backed by a Chrome DevTools Protocol target."""

import asyncio
import base64
import json
import logging
import weakref
from collections.abc import Callable
from functools import partial
from pathlib import Path
from typing import TYPE_CHECKING, Any

from page_harness.config import CONFIG
from page_harness.exceptions import ElementNotFoundError, PageEvaluationError
from page_harness.page.events import EventEmitter
from page_harness.page.views import (
	ConsoleMessage,
	InterceptedRequest,
	JavaScriptDialog,
	NetworkRequest,
	PageEvent,
	WaitUntil,
)

if TYPE_CHECKING:
	from cdp_use.cdp.page.commands import CaptureScreenshotParameters
	from cdp_use.cdp.runtime.commands import EvaluateParameters
	from cdp_use.cdp.target.commands import AttachToTargetParameters
	from cdp_use.client import CDPClient

	from .mouse import Mouse

logger = logging.getLogger(__name__)

# Page.lifecycleEvent names for each completion criterion
LIFECYCLE_EVENTS: dict[str, str] = {
	'load': 'load',
	'domcontentloaded': 'DOMContentLoaded',
	'networkidle0': 'networkIdle',
	'networkidle2': 'networkAlmostIdle',
}

ELEMENT_CENTER_JS = """(selector) => {
	const element = document.querySelector(selector);
	if (!element) return null;
	element.scrollIntoView({block: 'center', inline: 'center', behavior: 'instant'});
	const rect = element.getBoundingClientRect();
	const style = window.getComputedStyle(element);
	if (rect.width === 0 || rect.height === 0 || style.visibility === 'hidden') return null;
	return {x: rect.left + rect.width / 2, y: rect.top + rect.height / 2};
}"""


class _NavigationWaiter:
	"""Resolves once the main frame starts a new document and reaches the lifecycle event."""

	def __init__(self, lifecycle_event: str, future: asyncio.Future):
		self.lifecycle_event = lifecycle_event
		self.future = future
		self.loader_id: str | None = None

	def on_main_frame_lifecycle_event(self, loader_id: str, name: str) -> None:
		if self.future.done():
			return
		if name == 'init':
			self.loader_id = loader_id
			return
		if self.loader_id is not None and loader_id == self.loader_id and name == self.lifecycle_event:
			self.future.set_result(None)


class _CDPEventRouter:
	"""Routes a client's page events to the CDPPage attached to each session.

	``cdp_use`` keeps one handler per event method, so handlers are registered
	once per client and every page on that client shares them.
	"""

	def __init__(self):
		self._session_to_page: dict[str, 'CDPPage'] = {}
		self._cdp_handlers_registered = False

	def add(self, client: 'CDPClient', session_id: str, page: 'CDPPage') -> None:
		self._session_to_page[session_id] = page
		if not self._cdp_handlers_registered:
			self._register_cdp_handlers(client)
			self._cdp_handlers_registered = True

	def remove(self, session_id: str) -> None:
		self._session_to_page.pop(session_id, None)

	def _register_cdp_handlers(self, client: 'CDPClient') -> None:
		register = client.register
		register.Network.requestWillBeSent(self._route('_on_request_will_be_sent'))  # type: ignore
		register.Network.loadingFinished(self._route('_on_loading_finished'))  # type: ignore
		register.Network.loadingFailed(self._route('_on_loading_failed'))  # type: ignore
		register.Page.javascriptDialogOpening(self._route('_on_dialog_opening'))  # type: ignore
		register.Page.lifecycleEvent(self._route('_on_lifecycle_event'))  # type: ignore
		register.Page.frameNavigated(self._route('_on_frame_navigated'))  # type: ignore
		register.Runtime.consoleAPICalled(self._route('_on_console_api_called'))  # type: ignore
		register.Fetch.requestPaused(self._route('_on_request_paused'))  # type: ignore

	def _route(self, handler_name: str) -> Callable[[dict, str | None], None]:
		def handler(event: dict, session_id: str | None) -> None:
			page = self._session_to_page.get(session_id) if session_id else None
			if page is not None:
				getattr(page, handler_name)(event)

		return handler


# Routers by client; a page leaves its router on close()
_ROUTERS: 'weakref.WeakKeyDictionary[CDPClient, _CDPEventRouter]' = weakref.WeakKeyDictionary()


class CDPPage(EventEmitter):
	"""Page session for one CDP target (tab), driven through a ``cdp_use`` client.

	CDP events for the attached session are translated into :class:`PageEvent`
	emissions, so the harness never touches raw protocol payloads.
	"""

	def __init__(self, client: 'CDPClient', target_id: str):
		super().__init__()
		self._client = client
		self._target_id = target_id
		self._session_id: str | None = None
		self._main_frame_id: str | None = None
		self._mouse: 'Mouse | None' = None
		self._requests: dict[str, NetworkRequest] = {}
		self._navigation_waiters: list[_NavigationWaiter] = []
		self._background_tasks: set[asyncio.Task] = set()
		self._interception_enabled = False
		self.url = ''

	async def _ensure_session(self) -> str:
		"""Attach to the target and enable the domains the harness listens to."""
		if not self._session_id:
			params: 'AttachToTargetParameters' = {'targetId': self._target_id, 'flatten': True}
			result = await self._client.send.Target.attachToTarget(params)
			self._session_id = result['sessionId']

			self._route_events(self._session_id)

			await asyncio.gather(
				self._client.send.Page.enable(session_id=self._session_id),
				self._client.send.Runtime.enable(session_id=self._session_id),
				self._client.send.Network.enable(session_id=self._session_id),
			)
			await self._client.send.Page.setLifecycleEventsEnabled(params={'enabled': True}, session_id=self._session_id)

			frame_tree = await self._client.send.Page.getFrameTree(session_id=self._session_id)
			main_frame = frame_tree['frameTree']['frame']
			self._main_frame_id = main_frame['id']
			self.url = main_frame.get('url', '')
			logger.debug(f'Attached to target {self._target_id[-4:]} (session {self._session_id[-4:]})')

		return self._session_id

	def _route_events(self, session_id: str) -> None:
		router = _ROUTERS.get(self._client)
		if router is None:
			router = _ROUTERS[self._client] = _CDPEventRouter()
		router.add(self._client, session_id, self)

	async def close(self) -> None:
		"""Stop receiving events for this target and detach from it."""
		if not self._session_id:
			return
		session_id, self._session_id = self._session_id, None
		self._mouse = None
		router = _ROUTERS.get(self._client)
		if router is not None:
			router.remove(session_id)
		await self._client.send.Target.detachFromTarget(params={'sessionId': session_id})

	@property
	async def mouse(self) -> 'Mouse':
		if not self._mouse:
			session_id = await self._ensure_session()
			from .mouse import Mouse

			self._mouse = Mouse(self._client, session_id)
		return self._mouse

	# CDP event translation

	def _on_request_will_be_sent(self, event: dict) -> None:
		request_id = event.get('requestId', '')
		request = event.get('request', {})

		# A reused request id (redirect or re-issue) settles the previous handle first
		previous = self._requests.pop(request_id, None)
		if previous is not None:
			self.emit(PageEvent.REQUEST_FINISHED, previous)

		handle = NetworkRequest(
			request_id=request_id,
			url=request.get('url', ''),
			method=request.get('method', 'GET'),
			resource_type=event.get('type'),
		)
		self._requests[request_id] = handle
		self.emit(PageEvent.REQUEST, handle)

	def _on_loading_finished(self, event: dict) -> None:
		handle = self._requests.pop(event.get('requestId', ''), None)
		if handle is not None:
			self.emit(PageEvent.REQUEST_FINISHED, handle)

	def _on_loading_failed(self, event: dict) -> None:
		handle = self._requests.pop(event.get('requestId', ''), None)
		if handle is not None:
			handle.failure = event.get('errorText')
			self.emit(PageEvent.REQUEST_FAILED, handle)

	def _on_dialog_opening(self, event: dict) -> None:
		dialog = JavaScriptDialog(
			type=event.get('type', 'alert'),
			message=event.get('message', ''),
			default_value=event.get('defaultPrompt', ''),
			on_accept=partial(self._handle_dialog, True),
			on_dismiss=partial(self._handle_dialog, False),
		)
		logger.debug(f'Dialog opened: {dialog!r}')
		self.emit(PageEvent.DIALOG, dialog)

	def _on_console_api_called(self, event: dict) -> None:
		message = ConsoleMessage(
			type=event.get('type', 'log'),
			text=' '.join(_render_remote_object(arg) for arg in event.get('args', [])),
			url=self.url or None,
		)
		self.emit(PageEvent.CONSOLE, message)

	def _on_request_paused(self, event: dict) -> None:
		paused_id = event.get('requestId', '')
		request = event.get('request', {})
		intercepted = InterceptedRequest(
			url=request.get('url', ''),
			method=request.get('method', 'GET'),
			resource_type=event.get('resourceType'),
			on_abort=partial(self._fail_paused_request, paused_id),
			on_continue=partial(self._continue_paused_request, paused_id),
		)
		if not self.listener_count(PageEvent.REQUEST_INTERCEPTED):
			# Nobody decides for this request, let it through rather than stalling the page
			task = asyncio.ensure_future(self._continue_unclaimed(intercepted))
			self._background_tasks.add(task)
			task.add_done_callback(self._background_tasks.discard)
			return
		self.emit(PageEvent.REQUEST_INTERCEPTED, intercepted)

	def _on_lifecycle_event(self, event: dict) -> None:
		frame_id = event.get('frameId', '')
		loader_id = event.get('loaderId', '')
		name = event.get('name', '')
		if frame_id != self._main_frame_id:
			return
		logger.debug(f'Lifecycle {name} (loader {loader_id[-4:]})')
		for waiter in list(self._navigation_waiters):
			waiter.on_main_frame_lifecycle_event(loader_id, name)

	def _on_frame_navigated(self, event: dict) -> None:
		frame = event.get('frame', {})
		if not frame.get('parentId'):
			self._main_frame_id = frame.get('id', self._main_frame_id)
			self.url = frame.get('url', self.url)

	async def _handle_dialog(self, accept: bool, prompt_text: str | None = None) -> None:
		session_id = await self._ensure_session()
		params: dict[str, Any] = {'accept': accept}
		if prompt_text is not None:
			params['promptText'] = prompt_text
		await self._client.send.Page.handleJavaScriptDialog(params=params, session_id=session_id)

	async def _continue_unclaimed(self, intercepted: InterceptedRequest) -> None:
		try:
			await intercepted.continue_()
		except Exception as e:
			logger.warning(f'Failed to continue unclaimed request {intercepted.url}: {e}')

	async def _fail_paused_request(self, paused_id: str, error_reason: str) -> None:
		session_id = await self._ensure_session()
		await self._client.send.Fetch.failRequest(
			params={'requestId': paused_id, 'errorReason': error_reason}, session_id=session_id
		)

	async def _continue_paused_request(self, paused_id: str) -> None:
		session_id = await self._ensure_session()
		await self._client.send.Fetch.continueRequest(params={'requestId': paused_id}, session_id=session_id)

	# PageSession operations

	async def evaluate(self, page_function: str, *args: Any) -> Any:
		"""Call the JavaScript function ``page_function`` in the page with JSON-encoded ``args``.

		Fails as soon as a page listener fails, even mid round trip.
		"""
		return await self.watch(self._evaluate(page_function, args))

	async def _evaluate(self, page_function: str, args: tuple) -> Any:
		session_id = await self._ensure_session()

		encoded_args = ', '.join(json.dumps(arg) for arg in args)
		expression = f'({page_function})({encoded_args})'

		params: 'EvaluateParameters' = {'expression': expression, 'returnByValue': True, 'awaitPromise': True}
		result = await self._client.send.Runtime.evaluate(params, session_id=session_id)

		if 'exceptionDetails' in result:
			details = result['exceptionDetails']
			description = details.get('exception', {}).get('description') or details.get('text', 'Unknown error')
			raise PageEvaluationError(f'JavaScript evaluation failed: {description}')

		return result.get('result', {}).get('value')

	async def click(self, selector: str) -> None:
		await self.watch(self._click(selector))

	async def _click(self, selector: str) -> None:
		center = await self._evaluate(ELEMENT_CENTER_JS, (selector,))
		if not center:
			raise ElementNotFoundError(selector)
		mouse = await self.mouse
		await mouse.click(center['x'], center['y'])

	async def screenshot(self, path: str | Path) -> None:
		self.raise_if_failed()
		session_id = await self._ensure_session()

		params: 'CaptureScreenshotParameters' = {'format': 'png'}
		result = await self._client.send.Page.captureScreenshot(params, session_id=session_id)
		Path(path).write_bytes(base64.b64decode(result['data']))

	def wait_for_navigation(self, wait_until: WaitUntil = 'networkidle0', timeout: float | None = None) -> asyncio.Future:
		"""Start listening for the next main-frame navigation.

		The listener is registered before this returns, so a navigation
		triggered right afterwards cannot be missed. The returned future
		resolves once the new document reaches ``wait_until``, or fails with
		``TimeoutError`` after ``timeout`` seconds.
		"""
		if wait_until not in LIFECYCLE_EVENTS:
			raise ValueError(f'Unknown navigation completion criterion: {wait_until!r}')

		loop = asyncio.get_running_loop()
		future = loop.create_future()
		waiter = _NavigationWaiter(LIFECYCLE_EVENTS[wait_until], future)
		self._navigation_waiters.append(waiter)

		timeout = CONFIG.PAGE_HARNESS_NAVIGATION_TIMEOUT if timeout is None else timeout

		def _on_timeout() -> None:
			if not future.done():
				future.set_exception(TimeoutError(f'Navigation timeout of {timeout}s exceeded waiting for {wait_until}'))

		timer = loop.call_later(timeout, _on_timeout)

		def _cleanup(_: asyncio.Future) -> None:
			timer.cancel()
			if waiter in self._navigation_waiters:
				self._navigation_waiters.remove(waiter)

		future.add_done_callback(_cleanup)
		return future

	async def set_request_interception(self, enabled: bool) -> None:
		session_id = await self._ensure_session()
		if enabled == self._interception_enabled:
			return
		if enabled:
			await self._client.send.Fetch.enable(params={'patterns': [{'urlPattern': '*'}]}, session_id=session_id)
		else:
			await self._client.send.Fetch.disable(session_id=session_id)
		self._interception_enabled = enabled
		logger.debug(f'Request interception {"enabled" if enabled else "disabled"}')


def _render_remote_object(remote_object: dict) -> str:
	if 'value' in remote_object:
		value = remote_object['value']
		return value if isinstance(value, str) else json.dumps(value)
	return str(remote_object.get('description') or remote_object.get('unserializableValue') or remote_object.get('type', ''))
