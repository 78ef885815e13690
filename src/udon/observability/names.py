# src/udon/observability/names.py

"""Standard metric names for udon parsing.

Use these constants instead of hardcoded strings for consistency
across the codebase.

Note: All duration metrics are in milliseconds by convention.
"""

# ============================================================================
# Streaming Parser Metrics
# ============================================================================

# Duration
PARSER_FEED_DURATION = "udon_parser_feed_duration"
PARSER_FINISH_DURATION = "udon_parser_finish_duration"

# Counters
PARSER_BYTES_FED = "udon_parser_bytes_fed"
PARSER_EVENTS_EMITTED = "udon_parser_events_emitted"
PARSER_ERRORS_TOTAL = "udon_parser_errors_total"

# Gauges
PARSER_QUEUE_DEPTH = "udon_parser_queue_depth"


# ============================================================================
# Arena Metrics
# ============================================================================

# Counters (bytes copied to join content split across feeds)
ARENA_REASSEMBLED_BYTES = "udon_arena_reassembled_bytes"
