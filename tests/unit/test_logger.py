"""
Tests for the context-aware logger.
"""

import logging

from custom_fields_core.context.tenant_context import tenant_context
from custom_fields_core.utils.logger import (
    ContextAwareLogger,
    TenantContextFilter,
    configure_logging,
    get_logger,
)


def _record(msg="hello"):
    return logging.LogRecord("test", logging.INFO, __file__, 1, msg, None, None)


class TestContextAwareLogger:
    def test_extra_is_rendered_into_message(self, caplog):
        logger = ContextAwareLogger(logging.getLogger("custom_fields.test_extra"))

        with caplog.at_level(logging.INFO):
            logger.info("Created option set", extra={"tenant_id": "t1", "name": "regions"})

        record = caplog.records[-1]
        assert record.getMessage() == "Created option set | tenant_id=t1 | name=regions"
        assert record.tenant_id == "t1"

    def test_reserved_keys_do_not_break_logging(self, caplog):
        logger = ContextAwareLogger(logging.getLogger("custom_fields.test_reserved"))

        with caplog.at_level(logging.INFO):
            logger.warning("Collision", extra={"name": "regions", "message": "m"})

        assert caplog.records[-1].getMessage() == "Collision | name=regions | message=m"


class TestTenantContextFilter:
    def test_stamps_current_tenant(self):
        record = _record()

        with tenant_context("tenant-acme"):
            assert TenantContextFilter().filter(record) is True

        assert record.tenant_id == "tenant-acme"

    def test_leaves_record_alone_without_tenant(self):
        record = _record()

        assert TenantContextFilter().filter(record) is True
        assert not hasattr(record, "tenant_id")


class TestConfigureLogging:
    def test_configured_logger_is_returned_by_get_logger(self, capsys):
        logger = configure_logging("unit", log_level="warning")

        assert get_logger() is logger
        assert logger.logger.name == "custom_fields.unit"
        assert logger.logger.level == logging.WARNING

        logger.warning("Something odd", extra={"field_key": "industry"})

        assert "Something odd | field_key=industry" in capsys.readouterr().out

    def test_reconfiguring_replaces_handlers(self):
        configure_logging("unit")
        logger = configure_logging("unit")

        assert len(logger.logger.handlers) == 1

    def test_get_logger_falls_back_to_root(self):
        assert get_logger().logger is logging.getLogger()
