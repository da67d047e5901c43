"""Tests logging functions in grid_aligner."""
import logging

import pytest

import grid_aligner.logging_utils as ga_logging_utils


class TestLoggingUtils:
    def test_logger_singleton_behavior(self) -> None:
        """Test that logger instances are singleton per name."""
        logger1 = ga_logging_utils.setup_logger("ga_test_logger")
        logger2 = ga_logging_utils.setup_logger("ga_test_logger")
        assert logger1 is logger2
        assert len(logger1.handlers) == 1

    def test_logger_custom_formatter_and_handler(self) -> None:
        """Test custom formatter and handler are applied."""
        formatter = logging.Formatter("[CUSTOM] %(message)s")
        handler = logging.StreamHandler()
        logger = ga_logging_utils.setup_logger(
            "ga_custom_logger",
            formatter=formatter,
            handler=handler,
        )
        assert logger.name == "ga_custom_logger"
        assert logger.handlers == [handler]
        assert handler.formatter is formatter

    def test_shared_logger_does_not_propagate_by_default(self) -> None:
        fresh = ga_logging_utils.setup_logger("ga_fresh_logger")
        assert fresh.propagate is False

    @pytest.mark.parametrize(
        ("verbose", "level"),
        [(True, logging.DEBUG), (False, logging.INFO)],
    )
    def test_set_verbosity(
        self,
        verbose: bool,  # noqa: FBT001
        level: int,
    ) -> None:
        try:
            ga_logging_utils.set_verbosity(verbose=verbose)
            assert ga_logging_utils.logger.level == level
        finally:
            ga_logging_utils.set_verbosity(verbose=False)
