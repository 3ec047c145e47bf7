"""Pydantic models for polling waits."""

from pydantic import BaseModel, ConfigDict, Field


class ElementSnapshot(BaseModel):
	"""State of the first element matching a selector, read in one round trip."""

	model_config = ConfigDict(extra='ignore', populate_by_name=True)

	exists: bool = False
	visible: bool = False
	text_content: str | None = Field(default=None, alias='textContent')
	inner_text: str | None = Field(default=None, alias='innerText')


class PollSession(BaseModel):
	"""Bookkeeping for a single polling wait; discarded when the wait returns."""

	model_config = ConfigDict(extra='forbid')

	selector: str
	description: str
	interval: float = Field(gt=0)
	timeout: float = Field(ge=0)
	expected: str | None = None
	phase: str = 'visible'
	observed_field: str = 'text_content'
	attempts: int = 0
	last_snapshot: ElementSnapshot | None = None
	last_error: str | None = None

	@property
	def observed(self) -> str | None:
		if self.last_snapshot is None:
			return None
		if not self.last_snapshot.exists:
			return '<missing>'
		if self.phase == 'visible' and not self.last_snapshot.visible:
			return '<hidden>'
		return getattr(self.last_snapshot, self.observed_field)
