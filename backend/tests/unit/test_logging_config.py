"""
Logging Configuration Unit Tests
"""

import logging

from nim_proxy.logging_config import build_logging_config, setup_logging


def test_debug_levels():
    config = build_logging_config(debug=True)

    assert config["root"]["level"] == "DEBUG"
    assert config["loggers"]["nim_proxy"]["level"] == "DEBUG"
    assert config["loggers"]["uvicorn.access"]["level"] == "INFO"


def test_httpx_request_logs_quieted():
    config = build_logging_config(debug=False)

    assert config["loggers"]["httpx"]["level"] == "WARNING"
    assert config["loggers"]["nim_proxy"]["level"] == "INFO"


def test_setup_logging_applies_config():
    setup_logging()

    assert logging.getLogger("httpx").level == logging.WARNING
    assert logging.getLogger("nim_proxy").propagate is False
