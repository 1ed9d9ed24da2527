import uuid
from datetime import UTC, datetime
from typing import Callable

Clock = Callable[[], datetime]


def generate_uuid() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(UTC)
