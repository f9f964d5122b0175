"""Application layer - Runtime-type keyed interceptor rules."""

import logging
import threading
from typing import Any, Callable, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from strata_di.domain import InstanceInterceptor, as_interceptor, compose

logger = logging.getLogger(__name__)


class InterceptorRule(BaseModel):
    """A ``(type or predicate) -> interceptor`` rule.

    Attributes:
        match_type: Type whose instances (including subclasses) are matched.
        predicate: Alternative matcher receiving the runtime type.
        interceptor: Interceptor applied on a match.
        sequence: Registration order, used to break ties.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    match_type: Optional[type] = Field(default=None, description="Type matched by this rule.")
    predicate: Optional[Callable[[type], bool]] = Field(default=None, description="Type predicate.")
    interceptor: InstanceInterceptor = Field(..., description="Interceptor to apply.")
    sequence: int = Field(..., description="Registration order.")

    def rank(self, runtime_type: type) -> Optional[int]:
        """Specificity of this rule for ``runtime_type``, lower is more specific; None if no match."""
        mro = getattr(runtime_type, "__mro__", (runtime_type,))
        if self.match_type is not None:
            if self.match_type in mro:
                return mro.index(self.match_type)
            return None
        if self.predicate is not None and self.predicate(runtime_type):
            return len(mro)
        return None


class InterceptorChain:
    """Holds interceptor rules and answers lookups by runtime type.

    Composed interceptors are cached per type and the caches are dropped on
    every registration, so repeated lookups are dictionary reads.

    Attributes:
        _rules: Rules in registration order.
        _exact_cache: Composed interceptors of exact-type rules, per type.
        _find_cache: Composed interceptors of all matching rules, per type.
    """

    def __init__(self) -> None:
        self._rules: List[InterceptorRule] = []
        self._exact_cache: Dict[type, InstanceInterceptor] = {}
        self._find_cache: Dict[type, InstanceInterceptor] = {}
        self._lock = threading.RLock()

    def register(self, match_type: type, interceptor: Any) -> InterceptorRule:
        """Register an interceptor for a type and its subclasses.

        Multiple registrations for the same type compose in registration order.

        Args:
            match_type: The type to intercept.
            interceptor: An InstanceInterceptor or a callable ``value -> value``.

        Example:
            >>> chain.register(Repository, lambda repo: CachingRepository(repo))
        """
        if not isinstance(match_type, type):
            raise TypeError(f"match_type must be a type, got {match_type!r}")
        return self._add(match_type=match_type, interceptor=as_interceptor(interceptor))

    def register_rule(self, predicate: Callable[[type], bool], interceptor: Any) -> InterceptorRule:
        """Register an interceptor applied to every runtime type accepted by ``predicate``.

        Predicate rules rank after all type rules that match.
        """
        if not callable(predicate):
            raise TypeError("predicate must be callable")
        return self._add(predicate=predicate, interceptor=as_interceptor(interceptor))

    def _add(self, **fields: Any) -> InterceptorRule:
        with self._lock:
            rule = InterceptorRule(sequence=len(self._rules), **fields)
            self._rules.append(rule)
            self._exact_cache = {}
            self._find_cache = {}
        logger.debug("Registered interceptor %r (rule #%d)", rule.interceptor, rule.sequence)
        return rule

    def lookup(self, exact_type: type) -> InstanceInterceptor:
        """Return the composed interceptor registered for exactly ``exact_type``."""
        cached = self._exact_cache.get(exact_type)
        if cached is not None:
            return cached
        with self._lock:
            interceptor = compose(rule.interceptor for rule in self._rules if rule.match_type is exact_type)
            self._exact_cache[exact_type] = interceptor
        return interceptor

    def find(self, runtime_type: type) -> InstanceInterceptor:
        """Return the composed interceptor for a runtime type.

        Rules for the exact type come first, then rules for its ancestors in
        MRO order, then predicate rules; ties keep registration order.
        """
        cached = self._find_cache.get(runtime_type)
        if cached is not None:
            return cached
        with self._lock:
            rules = list(self._rules)
            find_cache = self._find_cache

        # Predicates are user code and run without the lock held
        ranked = []
        for rule in rules:
            rank = rule.rank(runtime_type)
            if rank is not None:
                ranked.append((rank, rule.sequence, rule.interceptor))
        ranked.sort(key=lambda item: (item[0], item[1]))
        interceptor = compose(item[2] for item in ranked)

        with self._lock:
            # A registration in the meantime replaced the cache; leave the new one empty
            if find_cache is self._find_cache:
                self._find_cache[runtime_type] = interceptor
        return interceptor

    def clear(self) -> None:
        with self._lock:
            self._rules.clear()
            self._exact_cache = {}
            self._find_cache = {}

    def __len__(self) -> int:
        return len(self._rules)

    def copy(self) -> "InterceptorChain":
        """Return a new chain with the same rules, in the same order."""
        clone = InterceptorChain()
        with self._lock:
            clone._rules = list(self._rules)
        return clone
