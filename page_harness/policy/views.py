"""Policy tables for page events."""

from collections.abc import Callable
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

APPLICATION_ERROR_MARKER = 'PlutoError'

NEW_VERSION_NOTICE = 'A new version of Pluto.jl is available! 🎉'

# Third-party hosts a notebook page reaches for at runtime; blocked in offline mode
DEFAULT_BLOCKED_DOMAINS: tuple[str, ...] = (
	'cdn.jsdelivr.net',
	'unpkg.com',
	'cdn.skypack.dev',
	'esm.sh',
	'firebase.google.com',
)


class DialogAction(str, Enum):
	ACCEPT = 'accept'
	IGNORE = 'ignore'


class DialogRule(BaseModel):
	"""Matches dialogs by (type, message) and says what to do with them."""

	model_config = ConfigDict(extra='forbid', frozen=True)

	name: str
	matches: Callable[[str, str], bool] = Field(description='Predicate over (dialog type, message)')
	action: DialogAction = DialogAction.ACCEPT
	note: str | None = Field(default=None, description='Logged at INFO level when the rule fires')

	@classmethod
	def for_type(cls, dialog_type: str, action: DialogAction = DialogAction.ACCEPT, note: str | None = None) -> 'DialogRule':
		return cls(name=f'type={dialog_type}', matches=lambda type_, _message: type_ == dialog_type, action=action, note=note)

	@classmethod
	def message_contains(cls, text: str, action: DialogAction = DialogAction.ACCEPT, note: str | None = None) -> 'DialogRule':
		return cls(name=f'message~{text!r}', matches=lambda _type, message: text in message, action=action, note=note)


DEFAULT_DIALOG_RULES: tuple[DialogRule, ...] = (
	DialogRule.for_type('beforeunload'),
	DialogRule.message_contains(
		NEW_VERSION_NOTICE,
		note='Ignoring version warning for now (but do remember to update Project.toml!).',
	),
)
