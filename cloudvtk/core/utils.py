from __future__ import annotations
import logging

def get_logger(name: str = "cloudvtk") -> logging.Logger:
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        fmt = logging.Formatter("[%(levelname)s] %(message)s")
        handler.setFormatter(fmt)
        logger.addHandler(handler)
        logger.setLevel(logging.INFO)
    return logger

def format_float(value: float, precision: int) -> str:
    """Format like a C++ stream with ``precision`` significant digits."""
    return format(float(value), f".{precision}g")
