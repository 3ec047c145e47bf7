from pydantic import BaseModel, ConfigDict, Field


class NavigationReport(BaseModel):
	"""Outcome of a guarded navigation."""

	model_config = ConfigDict(extra='forbid')

	settled: bool = Field(description='Whether the navigation-completion wait resolved')
	warning: str | None = Field(default=None, description='Why the navigation wait did not settle, if it did not')
	inflight_urls: list[str] = Field(default_factory=list, description='Requests still open when the guard finished')
	elapsed_time: float = 0.0
