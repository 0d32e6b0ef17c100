"""Tests for the loguru logging setup."""

import logging

from loguru import logger

import log_config


def test_stdlib_records_keep_their_caller() -> None:
    log_config.setup_logging("DEBUG")
    records = []
    sink_id = logger.add(lambda message: records.append(message.record), level="DEBUG")
    try:
        logging.getLogger("core.fancontrol.storage").warning("Configuration saved")
    finally:
        logger.remove(sink_id)

    assert len(records) == 1
    assert records[0]["message"] == "Configuration saved"
    assert records[0]["function"] == "test_stdlib_records_keep_their_caller"
    assert records[0]["name"] != "logging"
