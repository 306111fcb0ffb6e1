"""Tests for logging context managers."""

import asyncio
import logging

import pytest

from ridesim.sim_logging import (
    ContextFilter,
    DefaultCorrelationFilter,
    LogContext,
    log_context,
    log_ride_context,
)


@pytest.fixture
def logger():
    logger = logging.getLogger("test.ridesim.context")
    logger.setLevel(logging.DEBUG)
    return logger


@pytest.fixture
def captured_records(logger):
    """Capture records through the same filter chain setup_logging installs."""
    records: list[logging.LogRecord] = []

    class RecordCapture(logging.Handler):
        def emit(self, record: logging.LogRecord) -> None:
            records.append(record)

    handler = RecordCapture()
    handler.addFilter(ContextFilter())
    handler.addFilter(DefaultCorrelationFilter())
    logger.addHandler(handler)
    yield records
    logger.removeHandler(handler)


@pytest.mark.unit
class TestLogContext:
    def test_adds_fields(self, logger, captured_records):
        with log_context(driver_id="driver-123", leg="approach"):
            logger.info("moving")

        record = captured_records[0]
        assert record.driver_id == "driver-123"
        assert record.leg == "approach"

    def test_clears_on_exit(self, logger, captured_records):
        with log_context(driver_id="driver-1"):
            logger.info("inside")
        logger.info("outside")

        assert captured_records[0].driver_id == "driver-1"
        assert not hasattr(captured_records[1], "driver_id")

    def test_nested_contexts_restore_outer(self, logger, captured_records):
        with log_context(leg="approach"):
            with log_context(leg="trip", driver_id="d"):
                logger.info("inner")
            logger.info("outer")

        assert captured_records[0].leg == "trip"
        assert captured_records[1].leg == "approach"
        assert not hasattr(captured_records[1], "driver_id")

    def test_explicit_extra_wins(self, logger, captured_records):
        with log_context(driver_id="from-context"):
            logger.info("msg", extra={"driver_id": "from-extra"})

        assert captured_records[0].driver_id == "from-extra"

    def test_set_and_clear(self):
        with log_context():
            LogContext.set(ride_id="r-1")
            assert LogContext.get() == {"ride_id": "r-1"}
            LogContext.clear()
            assert LogContext.get() == {}


@pytest.mark.unit
class TestRideContext:
    def test_ride_id_becomes_correlation_id(self, logger, captured_records):
        with log_ride_context("ride-42", leg="trip"):
            logger.info("leg started")

        record = captured_records[0]
        assert record.ride_id == "ride-42"
        assert record.correlation_id == "ride-42"
        assert record.leg == "trip"

    def test_explicit_correlation_id(self, logger, captured_records):
        with log_ride_context("ride-42", correlation_id="req-7"):
            logger.info("msg")

        assert captured_records[0].correlation_id == "req-7"

    def test_default_correlation_outside_ride(self, logger, captured_records):
        logger.info("idle")
        assert captured_records[0].correlation_id == "-"

    async def test_tasks_do_not_share_context(self, logger, captured_records):
        async def ride(ride_id: str) -> None:
            with log_ride_context(ride_id):
                await asyncio.sleep(0.01)
                logger.info("tick")

        await asyncio.gather(ride("ride-a"), ride("ride-b"))

        assert sorted(r.ride_id for r in captured_records) == ["ride-a", "ride-b"]
        assert all(r.ride_id == r.correlation_id for r in captured_records)
