import threading
import time
from uuid import uuid4

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


def now_ms() -> int:
    """Return current wall-clock time in epoch milliseconds."""
    return time.time_ns() // 1_000_000


def new_id() -> str:
    """Generate an opaque identifier for projects, requirements and deployments."""
    return str(uuid4())


class MonotonicClock:
    """Millisecond clock whose readings strictly increase.

    Two mutations within the same millisecond still get distinct, ordered
    timestamps, so ``updated_at`` always moves forward.
    """

    def __init__(self) -> None:
        self._last = 0
        self._lock = threading.Lock()

    def now(self) -> int:
        with self._lock:
            current = max(now_ms(), self._last + 1)
            self._last = current
            return current


class CamelModel(BaseModel):
    """Base for persisted records: snake_case in Python, camelCase on the wire."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)
