"""
Clock

Wall-clock time source for deadline checks.
"""

import time


class SystemClock:
    """Current unix time in whole seconds"""

    def now(self) -> int:
        return int(time.time())


__all__ = ["SystemClock"]
