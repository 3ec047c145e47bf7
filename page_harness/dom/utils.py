from collections.abc import Sequence
from typing import TYPE_CHECKING, TypeVar

if TYPE_CHECKING:
	from page_harness.page.views import PageSession

T = TypeVar('T')

# innerText is the rendered text, unlike textContent it skips hidden nodes and honours CSS line breaks
INNER_TEXT_JS = '(selector) => document.querySelector(selector).innerText'

COUNT_CELLS_JS = """() => {
	const cells = Array.from(document.querySelectorAll('pluto-cell'));
	return cells.length;
}"""

PASTE_JS = """(code, selector) => {
	const clipboardEvent = new Event('paste', {bubbles: true, cancelable: true, composed: true});
	clipboardEvent['clipboardData'] = {getData: () => code};
	document.querySelector(selector).dispatchEvent(clipboardEvent);
}"""


async def get_text_content(page: 'PageSession', selector: str) -> str:
	"""Rendered text of the first element matching ``selector``."""
	return await page.evaluate(INNER_TEXT_JS, selector)


async def count_cells(page: 'PageSession') -> int:
	return await page.evaluate(COUNT_CELLS_JS) or 0


async def paste(page: 'PageSession', code: str, selector: str = 'body') -> None:
	"""Dispatch a synthetic paste event carrying ``code`` at the element matching ``selector``."""
	await page.evaluate(PASTE_JS, code, selector)


def last_element(items: Sequence[T]) -> T:
	return items[-1]
