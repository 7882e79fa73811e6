# config.py
"""Configuration constants for the cardest bucket algebra."""
import os

# Logging
LOGGER_NAME = "cardest"
LOG_LEVEL = os.environ.get("CARDEST_LOG_LEVEL", "WARNING")

# Validation
FREQUENCY_EPSILON = 1e-9        # Slack allowed above 1.0 / below 0.0 from float drift

# Sampling
DEFAULT_SAMPLE_SEED = int(os.environ.get("CARDEST_SAMPLE_SEED", "42"))

# Selectivity fallbacks, used when a domain has no distance metric
DEFAULT_EQUALITY_SELECTIVITY = 0.05
DEFAULT_RANGE_SELECTIVITY = 0.1
DEFAULT_JOIN_SELECTIVITY = 1.0 / 100
