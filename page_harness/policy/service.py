"""Session-lifetime handling of dialogs, console errors and offline request blocking."""

import logging
import weakref
from collections.abc import Iterable
from typing import TYPE_CHECKING

from page_harness.config import CONFIG
from page_harness.exceptions import ApplicationErrorDetected
from page_harness.page.views import ConsoleMessage, InterceptedRequest, JavaScriptDialog, PageEvent
from page_harness.policy.views import (
	APPLICATION_ERROR_MARKER,
	DEFAULT_BLOCKED_DOMAINS,
	DEFAULT_DIALOG_RULES,
	DialogAction,
	DialogRule,
)

if TYPE_CHECKING:
	from page_harness.page.views import PageSession

logger = logging.getLogger(__name__)

# Pages a policy is installed on, checked by raise_unreported_page_errors()
_policed_pages: 'weakref.WeakSet[PageSession]' = weakref.WeakSet()


class PageEventPolicy:
	"""Fixed rules for page events, installed once per page and never removed.

	- Dialogs: the first matching :class:`DialogRule` decides. A dialog no rule
	  matches is left open and logged; guessing an answer could hide a real
	  prompt from the application.
	- Console: an ``error`` message containing the application error marker
	  raises :class:`ApplicationErrorDetected`, which fails whatever the test
	  is waiting on.
	- Offline mode: requests to blocked domains are aborted, all others
	  continue. Install before the first navigation or early requests escape.
	"""

	def __init__(
		self,
		page: 'PageSession',
		offline: bool | None = None,
		blocked_domains: Iterable[str] = DEFAULT_BLOCKED_DOMAINS,
		dialog_rules: Iterable[DialogRule] = DEFAULT_DIALOG_RULES,
		error_marker: str = APPLICATION_ERROR_MARKER,
	):
		self.page = page
		self.offline = CONFIG.PLUTO_TEST_OFFLINE if offline is None else offline
		self.blocked_domains = tuple(blocked_domains)
		self.dialog_rules = tuple(dialog_rules)
		self.error_marker = error_marker
		self._installed = False

	async def install(self) -> 'PageEventPolicy':
		if self._installed:
			return self

		self.page.on(PageEvent.CONSOLE, self._on_console)
		self.page.on(PageEvent.DIALOG, self._on_dialog)
		_policed_pages.add(self.page)

		logger.info(f'Offline mode enabled: {self.offline}')
		if self.offline:
			self.page.on(PageEvent.REQUEST_INTERCEPTED, self._on_request_intercepted)
			await self.page.set_request_interception(True)

		self._installed = True
		return self

	def match_dialog(self, dialog: JavaScriptDialog) -> DialogRule | None:
		for rule in self.dialog_rules:
			if rule.matches(dialog.type, dialog.message):
				return rule
		return None

	def is_blocked(self, url: str) -> bool:
		return any(domain in url for domain in self.blocked_domains)

	def _on_console(self, message: ConsoleMessage) -> None:
		if message.type == 'error' and self.error_marker in message.text:
			logger.error(f'Bad {self.error_marker} - Failing\n{message.text}')
			raise ApplicationErrorDetected(self.error_marker, message.text)

	async def _on_dialog(self, dialog: JavaScriptDialog) -> None:
		rule = self.match_dialog(dialog)
		if rule is None:
			logger.warning(f'Unhandled {dialog.type} dialog left open: {dialog.message!r}')
			return

		if rule.note:
			logger.info(rule.note)
		if rule.action != DialogAction.ACCEPT:
			logger.debug(f'Dialog matched rule {rule.name}, leaving it alone')
			return

		try:
			await dialog.accept()
		except Exception as e:
			logger.warning(f'Failed to accept {dialog.type} dialog ({rule.name}): {e}')

	async def _on_request_intercepted(self, request: InterceptedRequest) -> None:
		try:
			if self.is_blocked(request.url):
				logger.error(f'Blocking request to {request.url}')
				await request.abort()
			else:
				await request.continue_()
		except Exception as e:
			logger.warning(f'Failed to resolve intercepted request {request.url}: {e}')


async def setup_page(page: 'PageSession', offline: bool | None = None) -> PageEventPolicy:
	"""Install the default policy on a fresh page, before it navigates anywhere."""
	return await PageEventPolicy(page, offline=offline).install()


def raise_unreported_page_errors() -> None:
	"""Raise the first fatal error no caller has seen yet, across every page a policy is installed on.

	A console error that arrives while nothing awaits the page is otherwise
	only raised by the next page call, which may never come. Each error is
	raised at most once.
	"""
	for page in list(_policed_pages):
		if page.fatal_error is not None and not page.fatal_error_reported:
			page.raise_if_failed()
