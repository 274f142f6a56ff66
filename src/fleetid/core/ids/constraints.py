"""
Validation constraints for generated ids.

Applications can ask for ids that satisfy extra rules (a partition, a
checksum, anything expressible as a predicate). Constraints come in two
registries:

- global constraints, applied to every constrained generation request
- domain constraints, selected by a caller-chosen domain name

Evaluation order matters. Global constraints run before local ones, and in
each list the first failing constraint decides the verdict; nothing after it
is evaluated. Constraint authors rely on this to put cheap checks in front of
expensive ones.

Public API:
    - IdValidationConstraint: Base class for constraints
    - FunctionConstraint: Wrap a plain predicate as a constraint
    - ConstraintRegistry: Thread-safe global + per-domain registry
    - classify: Evaluate constraints against a candidate id
    - InvalidConstraintsError: Raised for empty registrations
"""

from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable, Mapping, Sequence

from fleetid.core.ids.models import Identifier, IdValidationState

logger = logging.getLogger(__name__)


class InvalidConstraintsError(ValueError):
    """Raised when a constraint registration has nothing to register."""


class IdValidationConstraint(ABC):
    """
    A rule a generated id has to satisfy.

    Subclasses implement ``is_valid``. Override ``fail_fast`` to return True
    when a failure means the request can never be satisfied, so generation
    stops instead of drawing another candidate.
    """

    @abstractmethod
    def is_valid(self, identifier: Identifier) -> bool:
        """Return True if ``identifier`` satisfies this constraint."""

    def fail_fast(self) -> bool:
        """Whether a failure of this constraint aborts generation."""
        return False


class FunctionConstraint(IdValidationConstraint):
    """
    Constraint backed by a plain predicate.

    Example:
        >>> even = FunctionConstraint(lambda i: i.exponent % 2 == 0)
    """

    def __init__(
        self,
        predicate: Callable[[Identifier], bool],
        fail_fast: bool = False,
        name: str | None = None,
    ) -> None:
        self._predicate = predicate
        self._fail_fast = fail_fast
        self.name = name or getattr(predicate, "__name__", "predicate")

    def is_valid(self, identifier: Identifier) -> bool:
        return bool(self._predicate(identifier))

    def fail_fast(self) -> bool:
        return self._fail_fast

    def __repr__(self) -> str:
        return f"FunctionConstraint({self.name!r}, fail_fast={self._fail_fast})"


def _first_failure(
    identifier: Identifier,
    constraints: Iterable[IdValidationConstraint] | None,
) -> IdValidationConstraint | None:
    if not constraints:
        return None
    for constraint in constraints:
        if not constraint.is_valid(identifier):
            return constraint
    return None


def _verdict(failed: IdValidationConstraint) -> IdValidationState:
    if failed.fail_fast():
        return IdValidationState.INVALID_NON_RETRYABLE
    return IdValidationState.INVALID_RETRYABLE


def classify(
    identifier: Identifier,
    constraints: Sequence[IdValidationConstraint] | None,
    *,
    global_constraints: Sequence[IdValidationConstraint] | None = None,
    skip_global: bool = False,
) -> IdValidationState:
    """
    Evaluate constraints against a candidate id.

    Global constraints are checked first (unless ``skip_global``), then the
    local ones. The first failing constraint decides the verdict: fail-fast
    constraints make it non-retryable, everything else retryable.

    Args:
        identifier: Candidate id
        constraints: Local (domain or caller supplied) constraints
        global_constraints: Constraints applied to every request
        skip_global: Ignore ``global_constraints`` entirely

    Returns:
        The validation verdict
    """
    if not skip_global:
        failed = _first_failure(identifier, global_constraints)
        if failed is not None:
            return _verdict(failed)

    failed = _first_failure(identifier, constraints)
    if failed is not None:
        return _verdict(failed)

    return IdValidationState.VALID


def _require_constraints(
    constraints: Iterable[IdValidationConstraint] | None,
) -> tuple[IdValidationConstraint, ...]:
    items = tuple(constraints) if constraints is not None else ()
    if not items:
        raise InvalidConstraintsError("At least one constraint must be provided")
    return items


class ConstraintRegistry:
    """
    Global and per-domain constraint lists.

    Writers are serialized by a lock. Each write swaps in a new tuple, so
    readers never lock and always see a consistent (possibly slightly stale)
    snapshot.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._global: tuple[IdValidationConstraint, ...] = ()
        self._domains: dict[str, tuple[IdValidationConstraint, ...]] = {}

    @property
    def global_constraints(self) -> tuple[IdValidationConstraint, ...]:
        return self._global

    def domain_constraints(self, domain: str) -> tuple[IdValidationConstraint, ...]:
        """Constraints registered for ``domain`` (empty if unknown)."""
        return self._domains.get(domain, ())

    def domains(self) -> list[str]:
        return list(self._domains)

    def register_global(
        self, constraints: Iterable[IdValidationConstraint] | None
    ) -> None:
        """
        Append constraints to the global list.

        Raises:
            InvalidConstraintsError: If ``constraints`` is None or empty
        """
        items = _require_constraints(constraints)
        with self._lock:
            self._global = self._global + items
        logger.debug("Registered %d global constraint(s)", len(items))

    def register_domain(
        self, domain: str, constraints: Iterable[IdValidationConstraint] | None
    ) -> None:
        """
        Append constraints to ``domain``, creating the domain if needed.

        Raises:
            InvalidConstraintsError: If ``constraints`` is None or empty
        """
        items = _require_constraints(constraints)
        with self._lock:
            domains = dict(self._domains)
            domains[domain] = domains.get(domain, ()) + items
            self._domains = domains
        logger.debug("Registered %d constraint(s) for domain %s", len(items), domain)

    def replace(
        self,
        global_constraints: Iterable[IdValidationConstraint] | None = None,
        domain_constraints: Mapping[str, Iterable[IdValidationConstraint]] | None = None,
    ) -> None:
        """
        Bulk registration used at initialization.

        A given ``global_constraints`` replaces the global list. Each entry of
        ``domain_constraints`` replaces that domain's list; other domains are
        left alone.
        """
        with self._lock:
            if global_constraints is not None:
                self._global = tuple(global_constraints)
            if domain_constraints:
                domains = dict(self._domains)
                for domain, constraints in domain_constraints.items():
                    domains[domain] = tuple(constraints)
                self._domains = domains

    def clear(self) -> None:
        """Drop every registered constraint."""
        with self._lock:
            self._global = ()
            self._domains = {}


__all__ = [
    "ConstraintRegistry",
    "FunctionConstraint",
    "IdValidationConstraint",
    "InvalidConstraintsError",
    "classify",
]
