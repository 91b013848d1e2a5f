#!/usr/bin/env python3
"""
Configuration for the recipe scaling engine.
Values are read from the environment once at import time.
"""

import os


class ScalingConfig:
    """Configuration for recipe scaling."""

    # Serving bounds (product policy, enforced by the orchestrator)
    MIN_SERVINGS = int(os.getenv("SCALING_MIN_SERVINGS", "1"))
    MAX_SERVINGS = int(os.getenv("SCALING_MAX_SERVINGS", "50"))

    # Preset serving buttons
    PRESET_SERVINGS = [int(s) for s in os.getenv("SCALING_PRESET_SERVINGS", "1,2,4,6,8,10,12").split(",") if s.strip()]
    PRESET_MAX_SERVINGS = int(os.getenv("SCALING_PRESET_MAX_SERVINGS", "20"))

    # Rounding
    WEIGHT_PRECISION = int(os.getenv("SCALING_WEIGHT_PRECISION", "1"))  # decimal places

    # Caller-side debounce window
    DEBOUNCE_SECONDS = float(os.getenv("SCALING_DEBOUNCE_SECONDS", "0.1"))

    # Result cache
    CACHE_TTL = int(os.getenv("SCALING_CACHE_TTL", "3600"))  # seconds
    CACHE_MAX_ENTRIES = int(os.getenv("SCALING_CACHE_MAX_ENTRIES", "512"))

    # Logging
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    LOG_FORMAT = os.getenv("LOG_FORMAT", "json")  # json or text

    # Metrics
    ENABLE_METRICS = bool(os.getenv("ENABLE_METRICS", "true").lower() == "true")

config = ScalingConfig()
