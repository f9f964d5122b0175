from enum import Enum


class Lifecycle(str, Enum):
    """Defines how long a built value is reused.

    Attributes:
        UNIQUE: New value on every request, even within one build session.
        SESSION: One value per build session (per top-level resolution call).
        SINGLETON: One value per registry, until the registry is disposed.
    """

    UNIQUE = "unique"
    SESSION = "session"
    SINGLETON = "singleton"

    def __str__(self) -> str:
        return self.value


class InstanceKind(str, Enum):
    """Tags the closed set of recipe variants."""

    OBJECT = "object"
    LAMBDA = "lambda"
    CONSTRUCTOR = "constructor"
    REFERENCED = "referenced"
    LAZY = "lazy"

    def __str__(self) -> str:
        return self.value
