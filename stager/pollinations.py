"""
Keyless fallback provider: pollinations.ai renders an image from a GET URL,
so building the URL is all the fallback has to do.
"""

import time
from typing import Callable
from urllib.parse import quote

from stager.config import FALLBACK_BASE, OUTPUT_WIDTH, OUTPUT_HEIGHT

# Characters encodeURIComponent leaves alone
_UNRESERVED = "-_.!~*'()"


def current_millis() -> int:
    return int(time.time() * 1000)


def build_fallback_url(prompt: str, clock: Callable[[], int] = current_millis) -> str:
    """URL that renders `prompt`; the seed is the clock reading in milliseconds."""
    encoded = quote(prompt, safe=_UNRESERVED)
    return (
        f"{FALLBACK_BASE}/prompt/{encoded}"
        f"?width={OUTPUT_WIDTH}&height={OUTPUT_HEIGHT}&seed={clock()}&nologo=true&enhance=true"
    )
