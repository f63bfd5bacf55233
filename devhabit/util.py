# Utility functions
import uuid
from datetime import datetime, timezone


def camelize(name: str) -> str:
    """
    :param name: snake_case attribute name, e.g. "created_at_utc"
    :return: camelCase name, e.g. "createdAtUtc"
    """
    head, *tail = name.split("_")
    return head + "".join(part[:1].upper() + part[1:] for part in tail)


def new_id(prefix: str) -> str:
    """
    :param prefix: entity prefix, e.g. "h" for habits
    :return: unique entity id, e.g. "h_0191f7e2..."
    """
    return f"{prefix}_{uuid.uuid4()}"


def utcnow() -> datetime:
    """
    :return: the current time, in UTC
    """
    return datetime.now(timezone.utc)
