from page_harness.navigation.service import NavigationGuard, click_and_wait_for_navigation
from page_harness.navigation.views import NavigationReport

__all__ = ['NavigationGuard', 'NavigationReport', 'click_and_wait_for_navigation']
