import json
import logging

import pytest
from fastapi.testclient import TestClient

from main import create_app
from utils.observability import APP_HANDLER_ATTR, JSONFormatter, setup_logging


@pytest.fixture
def restore_root_logger():
    handlers = list(logging.root.handlers)
    level = logging.root.level
    yield
    logging.root.handlers = handlers
    logging.root.setLevel(level)


def app_handlers():
    return [h for h in logging.root.handlers if getattr(h, APP_HANDLER_ATTR, False)]


def test_repeated_setup_keeps_a_single_app_handler(restore_root_logger):
    foreign = logging.NullHandler()
    logging.root.addHandler(foreign)

    setup_logging("INFO", "json")
    setup_logging("DEBUG", "text")
    setup_logging("WARNING", "json")

    assert len(app_handlers()) == 1
    assert isinstance(app_handlers()[0].formatter, JSONFormatter)
    assert foreign in logging.root.handlers
    assert logging.root.level == logging.WARNING


def test_starting_two_apps_does_not_stack_handlers(restore_root_logger, client, settings, db):
    with TestClient(create_app(settings, db)):
        assert len(app_handlers()) == 1


def test_json_formatter_includes_extras():
    record = logging.LogRecord("blog", logging.INFO, __file__, 1, "Created post", None, None)
    record.post_id = 7
    record.user_id = 3

    log = json.loads(JSONFormatter().format(record))

    assert log["message"] == "Created post"
    assert log["post_id"] == 7
    assert log["user_id"] == 3
    assert "reason" not in log
