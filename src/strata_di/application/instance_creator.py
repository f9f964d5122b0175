from typing import TYPE_CHECKING, Any, Callable, List, Optional, Tuple, Type, TypeVar

from strata_di.application.interceptor_chain import InterceptorChain
from strata_di.domain import IInstanceCreator, Instance, InstanceInterceptor, InstanceKey

if TYPE_CHECKING:
    from strata_di.application.build_session import BuildSession

T = TypeVar("T")


class InstanceCreator(IInstanceCreator):
    """What a recipe sees of its build session.

    Every call delegates to the owning session, so nested dependencies take
    part in the same contextual tracking and caching as the top-level request.
    """

    def __init__(self, session: "BuildSession", interceptors: InterceptorChain) -> None:
        self._session = session
        self._interceptors = interceptors

    @property
    def session(self) -> "BuildSession":
        return self._session

    def resolve(self, contract: Type[T], name: Optional[str] = None) -> T:
        return self._session.get_instance(contract, name)

    def resolve_all(self, contract: Type[T]) -> List[T]:
        return self._session.get_all_instances(contract)

    def try_resolve(self, contract: Type[T], name: Optional[str] = None) -> Optional[T]:
        return self._session.try_get_instance(contract, name)

    def create_lazy(self, contract: Type[T], name: Optional[str] = None) -> Callable[[], T]:
        return self._session.create_lazy(contract, name)

    def build_instance(self, contract: Type[T], instance: Instance) -> T:
        return self._session.build_instance(contract, instance)

    def find_interceptor(self, runtime_type: type) -> InstanceInterceptor:
        return self._interceptors.find(runtime_type)

    @property
    def root_type(self) -> Optional[Any]:
        return self._session.root_type

    @property
    def root_concrete_type(self) -> Optional[Any]:
        return self._session.root_concrete_type

    @property
    def parent_type(self) -> Optional[Any]:
        return self._session.parent_type

    @property
    def current_type(self) -> Optional[Any]:
        return self._session.current_type

    @property
    def resolution_path(self) -> Tuple[InstanceKey, ...]:
        return self._session.resolution_path
