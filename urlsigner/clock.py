from datetime import datetime, timezone
from typing import Callable

Clock = Callable[[], int]


def system_clock() -> int:
    return int(datetime.now(timezone.utc).timestamp())
