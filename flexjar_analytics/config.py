"""Configuration constants for the analytics engine."""
from __future__ import annotations

import os

# Target completion time used as the TPI time-efficiency reference
TARGET_TIME_MS: int = int(os.getenv("FLEXJAR_TARGET_TIME_MS", "45000"))

# Average completion time assumed for tasks where no submission reports a duration
DEFAULT_TIME_MS: int = int(os.getenv("FLEXJAR_DEFAULT_TIME_MS", "60000"))

# Number of words returned by the word frequency analysis
WORD_FREQUENCY_LIMIT: int = int(os.getenv("FLEXJAR_WORD_FREQUENCY_LIMIT", "30"))

# Example responses kept per word in the word frequency analysis
MAX_SOURCE_RESPONSES: int = int(os.getenv("FLEXJAR_MAX_SOURCE_RESPONSES", "5"))

# Example texts kept per theme
MAX_THEME_EXAMPLES: int = int(os.getenv("FLEXJAR_MAX_THEME_EXAMPLES", "3"))

# Number of most recent responses/blockers listed in reports
RECENT_LIMIT: int = int(os.getenv("FLEXJAR_RECENT_LIMIT", "10"))

# Keywords listed per free-text field in the overview field stats
FIELD_KEYWORD_LIMIT: int = int(os.getenv("FLEXJAR_FIELD_KEYWORD_LIMIT", "10"))

# Cumulative vote share (percent) that defines the "long neck"
LONG_NECK_THRESHOLD: int = int(os.getenv("FLEXJAR_LONG_NECK_THRESHOLD", "80"))

# Result sets smaller than this are masked in the overview (0 disables masking)
MIN_AGGREGATION_THRESHOLD: int = int(
    os.getenv("FLEXJAR_MIN_AGGREGATION_THRESHOLD", "0")
)

# Length of the default reporting period when no date bounds are given
DEFAULT_PERIOD_DAYS: int = int(os.getenv("FLEXJAR_DEFAULT_PERIOD_DAYS", "30"))

# Metadata keys with more distinct values than this are not offered as segments
CONTEXT_TAG_MAX_CARDINALITY: int = int(
    os.getenv("FLEXJAR_CONTEXT_TAG_MAX_CARDINALITY", "10")
)
