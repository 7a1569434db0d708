"""Tests for structured service logging."""

import logging

from src.services.logging_utils import LOGGER_PREFIX, get_service_logger, log_operation


class TestGetServiceLogger:
    """Test logger naming."""

    def test_module_path_is_shortened(self):
        logger = get_service_logger("src.services.order_service")
        assert logger.name == f"{LOGGER_PREFIX}.order_service"

    def test_plain_name(self):
        assert get_service_logger("indent").name == f"{LOGGER_PREFIX}.indent"


class TestLogOperation:
    """Test the record produced by log_operation."""

    def test_message_and_context(self, caplog):
        logger = get_service_logger("order_service")
        with caplog.at_level(logging.INFO, logger=LOGGER_PREFIX):
            log_operation(logger, operation="create_order", outcome="success", order_id=7)

        record = caplog.records[-1]
        assert record.getMessage() == "create_order: success"
        assert record.levelno == logging.INFO
        assert record.operation == "create_order"
        assert record.outcome == "success"
        assert record.order_id == 7

    def test_level(self, caplog):
        logger = get_service_logger("costing_service")
        with caplog.at_level(logging.DEBUG, logger=LOGGER_PREFIX):
            log_operation(
                logger,
                operation="calculate_recipe_cost",
                outcome="unresolved_ingredient",
                level=logging.WARNING,
                ingredient_name="Hing",
            )

        record = caplog.records[-1]
        assert record.levelno == logging.WARNING
        assert record.ingredient_name == "Hing"
