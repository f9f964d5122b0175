from typing import Any, Callable, Iterable, List

from strata_di.domain.interfaces import InstanceInterceptor


class NullInterceptor(InstanceInterceptor):
    """Identity interceptor."""

    def process(self, target: Any) -> Any:
        return target

    def __repr__(self) -> str:
        return "NullInterceptor()"


class FuncInterceptor(InstanceInterceptor):
    """Adapts a plain callable ``target -> value`` to an interceptor.

    Example:
        >>> interceptor = FuncInterceptor(lambda service: LoggingProxy(service))
    """

    def __init__(self, func: Callable[[Any], Any], description: str = "") -> None:
        self._func = func
        self.description = description or getattr(func, "__name__", repr(func))

    def process(self, target: Any) -> Any:
        return self._func(target)

    def __repr__(self) -> str:
        return f"FuncInterceptor({self.description})"


class CompoundInterceptor(InstanceInterceptor):
    """Applies several interceptors in order, each receiving the previous result."""

    def __init__(self, interceptors: Iterable[InstanceInterceptor]) -> None:
        self.interceptors: List[InstanceInterceptor] = []
        for interceptor in interceptors:
            # Flatten so nested compounds keep a single, ordered list
            if isinstance(interceptor, CompoundInterceptor):
                self.interceptors.extend(interceptor.interceptors)
            elif not isinstance(interceptor, NullInterceptor):
                self.interceptors.append(interceptor)

    def process(self, target: Any) -> Any:
        for interceptor in self.interceptors:
            target = interceptor.process(target)
        return target

    def __repr__(self) -> str:
        return f"CompoundInterceptor({self.interceptors!r})"


def as_interceptor(value: Any) -> InstanceInterceptor:
    """Coerce an interceptor or a plain callable into an InstanceInterceptor."""
    if isinstance(value, InstanceInterceptor):
        return value
    if callable(value):
        return FuncInterceptor(value)
    raise TypeError(f"Expected an InstanceInterceptor or a callable, got {type(value).__name__}")


def compose(interceptors: Iterable[InstanceInterceptor]) -> InstanceInterceptor:
    """Compose interceptors in order, collapsing to the simplest equivalent."""
    compound = CompoundInterceptor(interceptors)
    if not compound.interceptors:
        return NullInterceptor()
    if len(compound.interceptors) == 1:
        return compound.interceptors[0]
    return compound
