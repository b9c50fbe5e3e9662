"""Current-time dependency so date-relative queries can be pinned in tests"""

from datetime import datetime
from typing import Callable


def get_clock() -> Callable[[], datetime]:
    return datetime.now
