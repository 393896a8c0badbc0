"""
Host and clock helpers for stamping stored results and queued events.
"""

import platform
import time

DEVICE_FAMILIES = {
    "iOS": "iOS",
    "iPadOS": "iOS",
    "Android": "Android",
    "Darwin": "macOS",
    "Windows": "Windows",
}


def now_ms() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


def guess_device() -> str:
    """Map the host platform to a coarse device family."""
    return DEVICE_FAMILIES.get(platform.system(), "Other")
