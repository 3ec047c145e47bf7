import logging
import sys

from page_harness.config import CONFIG

_HANDLER_NAME = 'page_harness'


def setup_logging(level: str | None = None) -> logging.Logger:
	"""Configure the ``page_harness`` logger tree with a single stdout handler.

	Safe to call more than once; the handler is only added the first time.
	"""
	log_level_name = (level or CONFIG.PAGE_HARNESS_LOGGING_LEVEL).upper()
	log_level = getattr(logging, log_level_name, logging.INFO)

	logger = logging.getLogger('page_harness')
	logger.setLevel(log_level)
	logger.propagate = True

	if not any(handler.get_name() == _HANDLER_NAME for handler in logger.handlers):
		handler = logging.StreamHandler(sys.stdout)
		handler.set_name(_HANDLER_NAME)
		handler.setFormatter(logging.Formatter('%(levelname)-8s [%(name)s] %(message)s'))
		logger.addHandler(handler)

	for handler in logger.handlers:
		handler.setLevel(log_level)

	return logger
