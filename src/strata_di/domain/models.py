from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from strata_di.domain.enums import Lifecycle
from strata_di.domain.exceptions import DEFAULT_NAME, CircularDependencyError, type_name


class InstanceKey(BaseModel):
    """Value object identifying a contract, optionally qualified by name.

    Attributes:
        contract: The requested type.
        name: Logical name, ``DEFAULT_NAME`` for the default registration.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    contract: Any = Field(..., description="The contract type.")
    name: str = Field(default=DEFAULT_NAME, min_length=1, description="Logical name of the registration.")

    @classmethod
    def of(cls, contract: Any, name: Optional[str] = None) -> "InstanceKey":
        return cls(contract=contract, name=DEFAULT_NAME if name is None else name)

    @property
    def is_default(self) -> bool:
        return self.name == DEFAULT_NAME

    def __str__(self) -> str:
        if self.is_default:
            return type_name(self.contract)
        return f"{type_name(self.contract)}('{self.name}')"


class ExplicitArguments(BaseModel):
    """Caller-supplied, already-built values that short-circuit resolution.

    Values are matched on the exact ``(contract, name)`` pair only.

    Example:
        >>> args = ExplicitArguments()
        >>> args.set(IWidget, AWidget())
        >>> container.get_instance(ILoggerHolder, explicit_arguments=args)
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    values: Dict[InstanceKey, Any] = Field(default_factory=dict, description="Overrides keyed by instance key.")

    def set(self, contract: Any, value: Any, name: Optional[str] = None) -> "ExplicitArguments":
        self.values[InstanceKey.of(contract, name)] = value
        return self

    def has(self, contract: Any, name: Optional[str] = None) -> bool:
        return InstanceKey.of(contract, name) in self.values

    def get(self, contract: Any, name: Optional[str] = None, default: Any = None) -> Any:
        return self.values.get(InstanceKey.of(contract, name), default)

    def __len__(self) -> int:
        return len(self.values)


class ResolutionFrame(BaseModel):
    """One entry of the resolution path: a recipe being built for a contract."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    key: InstanceKey
    instance_id: str
    concrete_type: Optional[Any] = None


class ResolutionPath(BaseModel):
    """Tracks the recipes currently being built, root first.

    Used both for contextual accessors (root and parent contracts) and
    for circular dependency detection.

    Attributes:
        frames: Frames of the recipes currently being built.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    frames: List[ResolutionFrame] = Field(default_factory=list)

    def push(self, frame: ResolutionFrame) -> None:
        """Add a frame to the path.

        Args:
            frame: The recipe about to be built.

        Raises:
            CircularDependencyError: If the same recipe is already on the path.
        """
        for index, existing in enumerate(self.frames):
            if existing.instance_id == frame.instance_id:
                cycle = [f.key for f in self.frames[index:]] + [frame.key]
                raise CircularDependencyError(cycle, self.keys() + (frame.key,))
        self.frames.append(frame)

    def pop(self) -> None:
        """Remove the most recent frame."""
        if self.frames:
            self.frames.pop()

    def keys(self) -> Tuple[InstanceKey, ...]:
        return tuple(frame.key for frame in self.frames)

    @property
    def depth(self) -> int:
        return len(self.frames)

    @property
    def current(self) -> Optional[ResolutionFrame]:
        return self.frames[-1] if self.frames else None

    @property
    def requester(self) -> Optional[ResolutionFrame]:
        return self.frames[-2] if len(self.frames) > 1 else None


class ContainerSettings(BaseModel):
    """Configuration for a container and the sessions it creates.

    Attributes:
        default_lifecycle: Lifecycle for recipes that do not set one.
        auto_wire: Whether unregistered concrete classes are built from their constructors.
        max_depth: Deepest resolution path allowed before the build is aborted.
    """

    model_config = ConfigDict(frozen=True)

    default_lifecycle: Lifecycle = Field(default=Lifecycle.SESSION, description="Lifecycle for unset recipes.")
    auto_wire: bool = Field(default=True, description="Auto-wire unregistered concrete classes.")
    max_depth: int = Field(default=256, ge=1, description="Maximum resolution depth.")
