"""Tests for the polling content waits."""

import asyncio

import pytest

from page_harness.exceptions import WaitTimeoutError
from page_harness.waiting import (
	PollingWaiter,
	wait_for_content,
	wait_for_content_to_become,
	wait_for_content_to_change,
)

# asyncio may fire a timer up to one clock tick early
CLOCK_SLACK = 0.005


def _later(delay: float, callback) -> None:
	asyncio.get_running_loop().call_later(delay, callback)


class TestContentChange:
	async def test_status_change_is_detected(self, page):
		page.set_text('#status', 'idle')
		_later(0.3, lambda: page.set_text('#status', 'done'))

		result = await PollingWaiter(page, timeout=2, polling_interval=0.1).wait_for_content_to_change('#status', 'idle')

		assert result == 'done'

	async def test_never_changing_content_times_out_inside_window(self, page):
		page.set_text('#status', 'idle')
		waiter = PollingWaiter(page, timeout=0.3, polling_interval=0.1)
		loop = asyncio.get_running_loop()

		start = loop.time()
		with pytest.raises(WaitTimeoutError) as exc_info:
			await waiter.wait_for_content_to_change('#status', 'idle')
		elapsed = loop.time() - start

		assert elapsed >= 0.3 - CLOCK_SLACK
		assert elapsed <= 0.3 + 0.1
		error = exc_info.value
		assert isinstance(error, TimeoutError)
		assert error.selector == '#status'
		assert error.phase == 'content'
		assert error.observed == 'idle'
		assert 'idle' in error.expected

	async def test_no_polls_survive_a_timeout(self, page):
		page.set_text('#status', 'idle')

		with pytest.raises(WaitTimeoutError):
			await PollingWaiter(page, timeout=0.2, polling_interval=0.05).wait_for_content_to_change('#status', 'idle')

		polls_at_timeout = len(page.evaluations)
		await asyncio.sleep(0.2)
		assert len(page.evaluations) == polls_at_timeout

	async def test_module_shortcut(self, page):
		page.set_text('#output', '1')
		_later(0.05, lambda: page.set_text('#output', '2'))

		assert await wait_for_content_to_change(page, '#output', '1', timeout=1) == '2'


class TestContentPresence:
	async def test_waits_for_visibility_then_text(self, page):
		page.set_text('#cell', '', visible=False)
		_later(0.05, lambda: page.set_text('#cell', ''))
		_later(0.15, lambda: page.set_text('#cell', 'x = 1', inner_text='x = 1\n'))

		result = await PollingWaiter(page, timeout=1, polling_interval=0.02).wait_for_content('#cell')

		assert result == 'x = 1\n'

	async def test_missing_element_fails_in_visibility_phase(self, page):
		with pytest.raises(WaitTimeoutError) as exc_info:
			await wait_for_content(page, '#nowhere', timeout=0.15)

		assert exc_info.value.phase == 'visible'
		assert exc_info.value.observed == '<missing>'

	async def test_hidden_element_is_not_visible(self, page):
		page.set_text('#spinner', 'loading', visible=False)
		waiter = PollingWaiter(page, timeout=0.15, polling_interval=0.05)

		snapshot = await waiter.wait_for_selector('#spinner', visible=False)
		assert snapshot.exists and not snapshot.visible

		with pytest.raises(WaitTimeoutError) as exc_info:
			await waiter.wait_for_selector('#spinner')
		assert exc_info.value.observed == '<hidden>'

	async def test_transient_evaluation_errors_are_retried(self, page):
		page.set_text('#title', 'Notebook')
		page.failing_evaluations = 2

		result = await PollingWaiter(page, timeout=1, polling_interval=0.01).wait_for_content('#title')

		assert result == 'Notebook'
		assert len(page.evaluations) >= 3

	async def test_persistent_errors_are_reported_on_timeout(self, page):
		page.failing_evaluations = 1000

		with pytest.raises(WaitTimeoutError) as exc_info:
			await PollingWaiter(page, timeout=0.1, polling_interval=0.02).wait_for_content('#title')

		assert 'Execution context was destroyed' in exc_info.value.last_error


class TestContentTarget:
	async def test_matches_rendered_text_exactly(self, page):
		page.set_text('#result', 'waiting')
		_later(0.05, lambda: page.set_text('#result', '42 ', inner_text='42'))

		result = await wait_for_content_to_become(page, '#result', '42', timeout=1)

		assert result == '42'

	async def test_reports_rendered_text_on_timeout(self, page):
		page.set_text('#result', 'raw', inner_text='forty-one')

		with pytest.raises(WaitTimeoutError) as exc_info:
			await PollingWaiter(page, timeout=0.1, polling_interval=0.02).wait_for_content_to_become('#result', '42')

		assert exc_info.value.expected == '42'
		assert exc_info.value.observed == 'forty-one'

	async def test_defaults_come_from_config(self, page, monkeypatch):
		monkeypatch.setenv('PAGE_HARNESS_DEFAULT_TIMEOUT', '7')
		monkeypatch.setenv('PAGE_HARNESS_POLLING_INTERVAL', '0.25')

		waiter = PollingWaiter(page)

		assert waiter.timeout == 7
		assert waiter.polling_interval == 0.25


class TestArguments:
	@pytest.mark.parametrize('interval', [0, -0.1])
	def test_non_positive_interval_is_rejected_up_front(self, page, interval):
		with pytest.raises(ValueError, match='polling_interval must be positive'):
			PollingWaiter(page, polling_interval=interval)

	def test_negative_timeout_is_rejected_up_front(self, page):
		with pytest.raises(ValueError, match='timeout must not be negative'):
			PollingWaiter(page, timeout=-1)

	async def test_negative_per_call_timeout_is_rejected(self, page):
		page.set_text('#status', 'idle')

		with pytest.raises(ValueError, match='timeout must not be negative'):
			await PollingWaiter(page).wait_for_selector('#status', timeout=-1)
