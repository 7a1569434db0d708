"""Structured logging for the costing engine and the services around it.

Every service module logs through a logger named
``podi_tracker.services.<module>`` and reports each operation as a
"<operation>: <outcome>" line, with the operation, the outcome and any
identifying values attached to the record via ``extra``:

    from src.services.logging_utils import get_service_logger, log_operation

    logger = get_service_logger(__name__)

    log_operation(logger, operation="create_order", outcome="success", order_id=12)

    log_operation(
        logger,
        operation="calculate_recipe_cost",
        outcome="unresolved_ingredient",
        level=logging.WARNING,
        recipe_name="Sambar Powder",
        ingredient_name="Hing",
    )

Context keys must not collide with LogRecord attributes (name, module,
message and the like); logging raises KeyError for those.
"""

import logging
from typing import Any

LOGGER_PREFIX = "podi_tracker.services"


def get_service_logger(name: str) -> logging.Logger:
    """
    Logger for a service module.

    Only the last dotted component of name is kept:

        >>> get_service_logger("src.services.costing_service").name
        'podi_tracker.services.costing_service'
    """
    module_name = name.rsplit(".", 1)[-1]
    return logging.getLogger(f"{LOGGER_PREFIX}.{module_name}")


def log_operation(
    logger: logging.Logger,
    operation: str,
    outcome: str,
    level: int = logging.INFO,
    **context: Any,
) -> None:
    """
    Emit one "<operation>: <outcome>" record.

    Args:
        logger: Service logger from get_service_logger()
        operation: Service function or step, e.g. "aggregate_indent"
        outcome: "success" or a short condition name such as "unresolved_ingredient"
        level: Record level; DEBUG for per-call chatter, WARNING for data problems
        **context: Identifying values (ids, names, totals) added as record attributes
    """
    logger.log(
        level,
        f"{operation}: {outcome}",
        extra={"operation": operation, "outcome": outcome, **context},
    )
