import logging

from django.conf import settings


def _stderr_handlers(logger):
    handlers = []
    while logger is not None:
        handlers.extend(h for h in logger.handlers if type(h) is logging.StreamHandler)
        if not logger.propagate:
            break
        logger = logger.parent
    return handlers


def test_finance_errors_reach_the_console():
    handlers = _stderr_handlers(logging.getLogger("finance.utils.http"))
    assert handlers
    assert any(h.level <= logging.WARNING for h in handlers)


def test_console_handler_is_not_gated_on_debug():
    config = settings.LOGGING
    assert "console" in config["root"]["handlers"]
    assert logging.getLevelName(config["handlers"]["console"]["level"]) <= logging.WARNING
    assert config["loggers"]["finance"].get("propagate", True)
