#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Utility functions for the region extraction pipeline.
"""
import time
import functools
from typing import Any, Callable, Dict, Iterable, Optional

from region_extract.core.logging_config import get_module_logger

# Initialize logger
logger = get_module_logger(__name__)


def timer(func: Callable) -> Callable:
    """
    Decorator to time function execution.

    Parameters
    ----------
    func : Callable
        Function to time.

    Returns
    -------
    Callable
        Wrapped function with timing.
    """
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        start_time = time.time()
        result = func(*args, **kwargs)
        elapsed = time.time() - start_time
        logger.debug(f"Function {func.__name__} took {elapsed:.3f} seconds to run")
        return result
    return wrapper


def coerce_value(value: str) -> Any:
    """Turn a command line string into an int, float or bool where it looks like one."""
    lowered = value.lower()
    if lowered in ("true", "yes"):
        return True
    if lowered in ("false", "no"):
        return False
    for cast in (int, float):
        try:
            return cast(value)
        except ValueError:
            pass
    return value


def parse_options(pairs: Optional[Iterable[str]]) -> Dict[str, Any]:
    """
    Parse ``KEY=VALUE`` strings into a dictionary.

    Parameters
    ----------
    pairs : iterable of str, optional
        Strings such as ``"quality=80"``.

    Returns
    -------
    dict
        Lower-cased keys mapped to coerced values.
    """
    options = {}
    for pair in pairs or []:
        key, sep, value = pair.partition("=")
        if not sep or not key.strip():
            raise ValueError(f"Expected KEY=VALUE, got {pair!r}")
        options[key.strip().lower()] = coerce_value(value.strip())
    return options
