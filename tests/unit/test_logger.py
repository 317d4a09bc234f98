import logging

import pytest

from app.logging.logger import Log


class TestConfigure:
    def test_sets_level_and_single_handler(self) -> None:
        logger = logging.getLogger("finimport")
        Log.configure("debug")
        Log.configure("warning")
        assert logger.level == logging.WARNING
        assert len(logger.handlers) == 1


class TestStage:
    def test_logs_duration(self, caplog: pytest.LogCaptureFixture) -> None:
        Log.configure("debug")
        with caplog.at_level(logging.DEBUG, logger="finimport"):
            with Log.stage("ExtractStep"):
                pass
        assert any(
            record.message.startswith("Stage ExtractStep took") for record in caplog.records
        )

    def test_logs_when_stage_raises(self, caplog: pytest.LogCaptureFixture) -> None:
        Log.configure("debug")
        with caplog.at_level(logging.DEBUG, logger="finimport"):
            with pytest.raises(ValueError):
                with Log.stage("EnhanceStep"):
                    raise ValueError("boom")
        assert any("Stage EnhanceStep took" in record.message for record in caplog.records)
