"""Constants used throughout the jobkit codebase."""

# Group assigned to jobs created without an explicit group
DEFAULT_GROUP = "DEFAULT"

# Integer bounds for the INT and LONG value kinds
INT32_MIN = -(2**31)
INT32_MAX = 2**31 - 1
INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1

# Timespans are encoded with up to seven fractional second digits (100ns ticks)
TIMESPAN_FRACTION_DIGITS = 7

# Environment variable consulted by configure_logging
LOG_LEVEL_ENV_VAR = "JOBKIT_LOG_LEVEL"
DEFAULT_LOG_LEVEL = "WARNING"
