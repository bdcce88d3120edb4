"""Health models."""

from enum import Enum


class Health(str, Enum):
    """Health status."""

    UP = "Up"
    DOWN = "Down"
    DEGRADED = "Degraded"
    ERROR = "Error"
