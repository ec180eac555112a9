import logging

import pytest

from smartcopy.log_setup import LOGGER_NAME


@pytest.fixture(autouse=True)
def _detach_smartcopy_handlers():
    yield
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)
