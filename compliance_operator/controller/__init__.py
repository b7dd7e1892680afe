"""
Controller wiring for the compliance operator.

Domain controllers append a setup function to ``ADD_TO_MANAGER_FUNCS``;
``add_to_manager`` hands the metrics reporter to the manager and then
gives every controller the same metrics handle.
"""

import logging
from typing import Callable, List

from .manager import Manager
from .metrics import Metrics

AddToManagerFunc = Callable[[Manager, Metrics], None]

ADD_TO_MANAGER_FUNCS: List[AddToManagerFunc] = []


def add_to_manager(manager: Manager, metrics: Metrics) -> None:
    """Add the metrics reporter and all controllers to the manager."""
    logger = logging.getLogger("compliance_operator.controller")

    logger.info("Adding metrics to manager")
    try:
        manager.add(metrics, name="metrics")
    except Exception as e:
        logger.error(f"Failed to add metrics to manager: {e}")
        raise
    logger.info("Metrics added to manager successfully")

    logger.info("Adding controllers to manager")
    for add_func in ADD_TO_MANAGER_FUNCS:
        func_name = getattr(add_func, '__name__', repr(add_func))
        try:
            add_func(manager, metrics)
        except Exception as e:
            logger.error(f"Failed to add controller to manager: {func_name}: {e}")
            raise
        logger.info(f"Controller added to manager successfully: {func_name}")


__all__ = [
    'ADD_TO_MANAGER_FUNCS',
    'AddToManagerFunc',
    'add_to_manager',
    'Manager',
    'Metrics',
]
