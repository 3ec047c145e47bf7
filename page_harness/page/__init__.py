"""Controlled browser page: the session contract and its CDP implementation."""

from page_harness.page.events import EventEmitter
from page_harness.page.target import CDPPage
from page_harness.page.views import (
	ConsoleMessage,
	InterceptedRequest,
	JavaScriptDialog,
	NetworkRequest,
	PageEvent,
	PageSession,
	WaitUntil,
)

__all__ = [
	'CDPPage',
	'ConsoleMessage',
	'EventEmitter',
	'InterceptedRequest',
	'JavaScriptDialog',
	'NetworkRequest',
	'PageEvent',
	'PageSession',
	'WaitUntil',
]
