from page_harness.tracking.service import RequestTracker

__all__ = ['RequestTracker']
