"""
Runtime settings for coreduce, read from the environment at import time.
"""

import os

# Environment variable to control step tracing
DEBUG_STEPS = os.environ.get("COREDUCE_DEBUG", "").lower() in ("1", "true", "yes")


__all__ = ["DEBUG_STEPS"]
