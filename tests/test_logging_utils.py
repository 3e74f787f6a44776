from __future__ import annotations

import logging
from collections.abc import Iterator

import pytest
from loguru import logger

from eumgrid import logging_utils
from eumgrid.logging_utils import bind_request_id, configure_logging, current_request_id


class CollectingHandler(logging.Handler):
    def __init__(self) -> None:
        super().__init__()
        self.records: list[logging.LogRecord] = []

    def emit(self, record: logging.LogRecord) -> None:
        self.records.append(record)


@pytest.fixture(autouse=True)
def fresh_logging(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    monkeypatch.setattr(logging_utils, "_CONFIGURED_PROFILE", None)
    yield
    logger.remove()


def test_request_id_is_scoped_to_block() -> None:
    assert current_request_id() == "-"
    with bind_request_id("req-1"):
        assert current_request_id() == "req-1"
    assert current_request_id() == "-"


def test_default_profile_includes_request_id(capsys: pytest.CaptureFixture[str]) -> None:
    configure_logging(profile="default", level="DEBUG")

    with bind_request_id("req-42"):
        logger.info("grid.fetch.start call_id={}", "P_1")

    err = capsys.readouterr().err
    assert "req-42 | grid.fetch.start call_id=P_1" in err


def test_console_profile_leaves_layout_to_rich(monkeypatch: pytest.MonkeyPatch) -> None:
    handler = CollectingHandler()
    monkeypatch.setattr(logging_utils, "_build_console_handler", lambda: handler)

    configure_logging(profile="console")
    with bind_request_id("req-7"):
        logger.info("grid.load.done rows={}", 3)

    assert [record.getMessage().strip() for record in handler.records] == ["grid.load.done rows=3"]


def test_level_filters_records(monkeypatch: pytest.MonkeyPatch) -> None:
    handler = CollectingHandler()
    monkeypatch.setattr(logging_utils, "_build_console_handler", lambda: handler)

    configure_logging(profile="console", level="warning")
    logger.info("api.call.response status=200")
    logger.warning("api.call.response status=500")

    assert [record.getMessage().strip() for record in handler.records] == ["api.call.response status=500"]
