"""
Utility helpers for the joint assessment workflow

Simple utility functions for ID generation and numeric bounds.
"""

import math
import uuid


def generate_assessment_id(short=True):
    """
    Generate unique assessment identifier

    Args:
        short (bool): If True, return 8-char hex. If False, return full UUID.

    Returns:
        str: Assessment ID

    Examples:
        >>> generate_assessment_id()
        'a3f7e2b9'

        >>> generate_assessment_id(short=False)
        'a3f7e2b9c1d2e3f4a5b6c7d8e9f0a1b2'
    """
    full_id = uuid.uuid4().hex
    return full_id[:8] if short else full_id


def clamp(value, lower, upper):
    """
    Clamp a numeric value into [lower, upper]

    Args:
        value: int or float to clamp (bool is rejected)
        lower: Inclusive lower bound
        upper: Inclusive upper bound

    Returns:
        float: value pulled back to the nearest bound if outside the range

    Raises:
        ValueError: If value is not a real number or is NaN

    Examples:
        >>> clamp(150, 0, 100)
        100.0

        >>> clamp(-3.5, 0, 300)
        0.0
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"Expected a number, got {type(value).__name__}")
    if math.isnan(value):
        raise ValueError("Expected a number, got NaN")
    return float(min(max(value, lower), upper))
