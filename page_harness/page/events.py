"""Listener registry shared by every page session implementation."""

import asyncio
import inspect
import logging
from collections import defaultdict
from collections.abc import Awaitable, Callable
from typing import Any, NoReturn, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar('T')


class EventEmitter:
	"""Fans page events out to listeners on a single asyncio event loop.

	Delivery contract: ``emit`` is only called from the event loop thread.
	Synchronous listeners run to completion, one after another, before
	``emit`` returns; coroutine listeners are scheduled as tasks on the same
	loop. No two listeners ever run at the same time, and none runs while
	the code awaiting on the loop is between two awaits. Listeners may
	therefore mutate plain dicts without locks. Driving ``emit`` from another
	thread breaks this contract.

	A listener that raises does not stop delivery to the others. Its
	exception becomes the emitter's fatal error: every call running under
	:meth:`watch` is cancelled and fails with it, and :meth:`raise_if_failed`
	re-raises it. ``fatal_error_reported`` tells whether any caller has seen it.
	"""

	def __init__(self) -> None:
		self._listeners: dict[str, list[Callable[..., Any]]] = defaultdict(list)
		self._listener_tasks: set[asyncio.Task] = set()
		self._failure: asyncio.Future | None = None
		self.fatal_error: BaseException | None = None
		self.fatal_error_reported = False

	def on(self, event: str, handler: Callable[..., Any]) -> None:
		self._listeners[str(event)].append(handler)

	def remove_listener(self, event: str, handler: Callable[..., Any]) -> None:
		handlers = self._listeners.get(str(event))
		if handlers and handler in handlers:
			handlers.remove(handler)

	def listener_count(self, event: str) -> int:
		return len(self._listeners.get(str(event), ()))

	def emit(self, event: str, *args: Any) -> None:
		for handler in list(self._listeners.get(str(event), ())):
			try:
				result = handler(*args)
			except Exception as e:
				self._fail(e)
				continue

			if inspect.isawaitable(result):
				task = asyncio.ensure_future(result)
				self._listener_tasks.add(task)
				task.add_done_callback(self._on_listener_task_done)

	def raise_if_failed(self) -> None:
		if self.fatal_error is not None:
			self._raise_fatal_error()

	async def watch(self, awaitable: Awaitable[T]) -> T:
		"""Await ``awaitable``, abandoning it as soon as a listener fails."""
		if self.fatal_error is not None:
			if inspect.iscoroutine(awaitable):
				awaitable.close()
			self._raise_fatal_error()

		task = asyncio.ensure_future(awaitable)
		failure = self._failure_future()
		try:
			done, _ = await asyncio.wait({task, failure}, return_when=asyncio.FIRST_COMPLETED)
		except asyncio.CancelledError:
			# the watched work must not outlive its caller
			task.cancel()
			await asyncio.wait({task})
			raise

		if task in done:
			return task.result()

		task.cancel()
		await asyncio.wait({task})
		self._raise_fatal_error()

	async def drain(self) -> None:
		"""Wait for coroutine listeners scheduled so far."""
		while self._listener_tasks:
			await asyncio.wait(set(self._listener_tasks))

	def _raise_fatal_error(self) -> NoReturn:
		assert self.fatal_error is not None
		self.fatal_error_reported = True
		raise self.fatal_error

	def _failure_future(self) -> asyncio.Future:
		if self._failure is None:
			self._failure = asyncio.get_running_loop().create_future()
			if self.fatal_error is not None:
				self._failure.set_result(None)
		return self._failure

	def _on_listener_task_done(self, task: asyncio.Task) -> None:
		self._listener_tasks.discard(task)
		if task.cancelled():
			return
		error = task.exception()
		if error is not None:
			self._fail(error)

	def _fail(self, error: BaseException) -> None:
		if self.fatal_error is not None:
			logger.debug(f'Ignoring listener error after fatal error: {type(error).__name__}: {error}')
			return

		logger.debug(f'Page listener failed: {type(error).__name__}: {error}')
		self.fatal_error = error
		if self._failure is not None and not self._failure.done():
			self._failure.set_result(None)
