from page_harness.policy.service import PageEventPolicy, raise_unreported_page_errors, setup_page
from page_harness.policy.views import (
	APPLICATION_ERROR_MARKER,
	DEFAULT_BLOCKED_DOMAINS,
	DEFAULT_DIALOG_RULES,
	DialogAction,
	DialogRule,
)

__all__ = [
	'APPLICATION_ERROR_MARKER',
	'DEFAULT_BLOCKED_DOMAINS',
	'DEFAULT_DIALOG_RULES',
	'DialogAction',
	'DialogRule',
	'PageEventPolicy',
	'raise_unreported_page_errors',
	'setup_page',
]
