"""Errors raised by page_harness."""


class PageHarnessError(Exception):
	"""Base class for harness errors."""


class WaitTimeoutError(PageHarnessError, TimeoutError):
	"""A polling wait's condition never held before its deadline."""

	def __init__(
		self,
		selector: str,
		description: str,
		timeout: float,
		phase: str,
		expected: str | None = None,
		observed: str | None = None,
		last_error: str | None = None,
	):
		self.selector = selector
		self.description = description
		self.timeout = timeout
		self.phase = phase
		self.expected = expected
		self.observed = observed
		self.last_error = last_error

		message = f'Timeout {timeout}s waiting for {description} (selector={selector!r}, phase={phase}'
		if expected is not None:
			message += f', expected={expected!r}'
		if observed is not None:
			message += f', observed={observed!r}'
		if last_error is not None:
			message += f', last_error={last_error}'
		super().__init__(message + ')')


class NavigationSettleWarning(UserWarning):
	"""The navigation-completion wait inside a guarded action failed or timed out.

	Only ever logged and reported, never raised.
	"""

	def __init__(self, error: BaseException):
		self.error = error
		super().__init__(f'Network idle never happened after navigation: {type(error).__name__}: {error}')


class ApplicationErrorDetected(PageHarnessError):
	"""The application wrote its error marker to the console during a test."""

	def __init__(self, marker: str, text: str):
		self.marker = marker
		self.text = text
		super().__init__(f'{marker} encountered. Let\'s fix this!\n{text}')


class PageEvaluationError(PageHarnessError):
	"""JavaScript evaluated in the page threw."""


class ElementNotFoundError(PageHarnessError):
	"""No visible element matches the selector of an action."""

	def __init__(self, selector: str):
		self.selector = selector
		super().__init__(f'No visible element matches selector {selector!r}')
