"""Order number generation.

Format: <prefix>-<last 6 digits of the epoch-millisecond clock><3-digit random>
e.g. ORD-482913071

Numbers are not guaranteed unique: two conversions within the same
millisecond window can draw the same suffix. The order_number column is
unique, so a collision surfaces as an IntegrityError on commit.
"""

import random
import re
import time
from typing import Callable, Optional

from config import get_settings


def order_number_pattern(prefix: Optional[str] = None) -> re.Pattern:
    """Regex matching numbers produced by generate_order_number."""
    prefix = prefix or get_settings().ORDER_NUMBER_PREFIX
    return re.compile(rf"^{re.escape(prefix)}-\d{{9}}$")


def generate_order_number(
    prefix: Optional[str] = None,
    clock_ms: Optional[Callable[[], int]] = None,
    rng: Optional[random.Random] = None,
) -> str:
    """Generate a new order number.

    Args:
        prefix: Number prefix (default ORDER_NUMBER_PREFIX)
        clock_ms: Millisecond clock, injectable for tests
        rng: Random source, injectable for tests

    Returns:
        str: Order number such as "ORD-482913071"
    """
    prefix = prefix or get_settings().ORDER_NUMBER_PREFIX
    now_ms = clock_ms() if clock_ms else int(time.time() * 1000)
    suffix = (rng or random).randint(0, 999)

    timestamp = str(now_ms)
    return f"{prefix}-{timestamp[-6:].zfill(6)}{suffix:03d}"
