"""Tests for guarded navigations."""

import asyncio
import logging

import pytest

from page_harness.exceptions import ElementNotFoundError
from page_harness.navigation import NavigationGuard, click_and_wait_for_navigation
from page_harness.page.views import PageEvent


class TestNavigationGuard:
	async def test_navigation_completing_during_click_is_observed(self, page):
		"""The wait is registered before the click, so an instant navigation is not missed"""
		page.set_text('a#open', 'Open notebook')
		page.click_handlers['a#open'] = page.complete_navigation

		report = await click_and_wait_for_navigation(page, 'a#open', timeout=1)

		assert report.settled
		assert report.warning is None
		assert page.clicks == ['a#open']
		assert page.navigation_waits[0][1] == 'networkidle0'

	async def test_wait_is_registered_before_action_runs(self, page):
		registered_before_action = []

		async def action():
			registered_before_action.append(len(page.navigation_waits))
			page.complete_navigation()

		await NavigationGuard(page, timeout=1).run(action)

		assert registered_before_action == [1]

	async def test_navigation_timeout_is_only_a_warning(self, page, caplog):
		page.set_text('a#stay', 'Stay here')

		with caplog.at_level(logging.WARNING, logger='page_harness'):
			report = await click_and_wait_for_navigation(page, 'a#stay', timeout=0.1)

		assert not report.settled
		assert 'Network idle never happened' in report.warning
		assert any('Network idle never happened' in record.message for record in caplog.records)

	async def test_open_connections_are_reported_not_raised(self, page, caplog):
		page.set_text('a#open', 'Open')

		def navigate():
			page.start_request('wss://example.com/channel')
			finished = page.start_request('https://example.com/notebook.js')
			page.emit(PageEvent.REQUEST_FINISHED, finished)
			page.complete_navigation()

		page.click_handlers['a#open'] = navigate

		with caplog.at_level(logging.WARNING, logger='page_harness'):
			report = await click_and_wait_for_navigation(page, 'a#open', timeout=1)

		assert report.settled
		assert report.inflight_urls == ['wss://example.com/channel']
		assert any('Open connections' in record.message for record in caplog.records)

	async def test_requests_before_guard_are_not_reported(self, page):
		page.start_request('https://example.com/long-poll')
		page.set_text('a#open', 'Open')
		page.click_handlers['a#open'] = page.complete_navigation

		report = await click_and_wait_for_navigation(page, 'a#open', timeout=1)

		assert report.inflight_urls == []

	async def test_action_failure_propagates_and_cleans_up(self, page):
		with pytest.raises(ElementNotFoundError):
			await click_and_wait_for_navigation(page, '#missing', timeout=5)

		future = page.navigation_waits[0][0]
		assert future.cancelled()
		assert page.listener_count(PageEvent.REQUEST) == 0
		assert page.listener_count(PageEvent.REQUEST_FINISHED) == 0
		assert page.listener_count(PageEvent.REQUEST_FAILED) == 0

	async def test_tracker_is_detached_after_success(self, page):
		page.set_text('a#open', 'Open')
		page.click_handlers['a#open'] = page.complete_navigation

		await click_and_wait_for_navigation(page, 'a#open', timeout=1)

		assert page.listener_count(PageEvent.REQUEST) == 0

	async def test_navigation_that_settles_later(self, page):
		page.set_text('a#open', 'Open')
		page.click_handlers['a#open'] = lambda: asyncio.get_running_loop().call_later(0.1, page.complete_navigation)

		report = await NavigationGuard(page, wait_until='load', timeout=1).run(lambda: page.click('a#open'))

		assert report.settled
		assert report.elapsed_time >= 0.09
		assert page.navigation_waits[0][1] == 'load'
