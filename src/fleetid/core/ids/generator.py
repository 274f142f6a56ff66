"""
Id generator with per-millisecond collision avoidance.

This module provides ``IdGenerator``, which combines a clock, a random
source and the collision ledger to mint ids that are unique within the
process, stamped with a node number so they stay unique across a fleet.

Generator methods:
    - next_candidate: Reserve a collision-free (timestamp, exponent) pair
    - generate: Build an id with no validation
    - generate_with_constraints: Build an id that satisfies constraints
    - generate_for_domain: Same, using constraints registered for a domain
    - attempt_with_constraints: Same, returning the full RetryOutcome
    - parse: Decode an id string

Example:
    >>> generator = IdGenerator(node=7)
    >>> identifier = generator.generate("ORD")
    >>> identifier.node
    7
    >>> generator.parse(identifier.text).exponent == identifier.exponent
    True

Note:
    Constrained generation has a cost: every candidate is validated, and
    retryable failures draw a new candidate. Heavy constraint sets lower the
    achievable id rate.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import timezone, tzinfo
from typing import TYPE_CHECKING

from fleetid.core.ids.clock import Clock, RandomSource, SecureRandomSource, SystemClock
from fleetid.core.ids.collision import CollisionChecker
from fleetid.core.ids.constraints import (
    ConstraintRegistry,
    IdValidationConstraint,
    classify,
)
from fleetid.core.ids.models import (
    MAX_ID_PER_MS,
    MAX_NODE,
    GenerationAttempt,
    Identifier,
)
from fleetid.core.ids.parser import format_id, parse_id, to_datetime
from fleetid.core.ids.retry import DEFAULT_MAX_ATTEMPTS, RetryController, RetryOutcome

if TYPE_CHECKING:
    from fleetid.core.config.models import FleetIdConfig

logger = logging.getLogger(__name__)


class IdGenerator:
    """
    Mints node-stamped, millisecond-sortable ids.

    The node number is fixed for the lifetime of the generator. Everything
    the generator depends on can be injected, which is how tests pin time and
    how applications share one collision ledger between generators.

    Attributes:
        node: Node number stamped into every id
        registry: Constraint registry used for constrained generation
        tz: Timezone the timestamp field is rendered in
    """

    def __init__(
        self,
        node: int = 0,
        *,
        clock: Clock | None = None,
        random_source: RandomSource | None = None,
        collision_checker: CollisionChecker | None = None,
        registry: ConstraintRegistry | None = None,
        max_ids_per_ms: int = MAX_ID_PER_MS,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        tz: tzinfo = timezone.utc,
    ) -> None:
        """
        Initialize the generator.

        Args:
            node: Node number (0-9999)
            clock: Time source (defaults to SystemClock)
            random_source: Disambiguator source (defaults to SecureRandomSource)
            collision_checker: Ledger to reserve against (shared if given)
            registry: Constraint registry (a private one if omitted)
            max_ids_per_ms: Size of the disambiguator space (1-1000)
            max_attempts: Attempt ceiling for constrained generation
            tz: Fixed-offset timezone for the timestamp field

        Raises:
            ValueError: If node or max_ids_per_ms is out of range, or tz is
                not a fixed-offset ``datetime.timezone``
        """
        if not 0 <= node <= MAX_NODE:
            raise ValueError(f"node must be between 0 and {MAX_NODE}, got {node}")
        if not 1 <= max_ids_per_ms <= MAX_ID_PER_MS:
            raise ValueError(
                f"max_ids_per_ms must be between 1 and {MAX_ID_PER_MS}, got {max_ids_per_ms}"
            )
        # Local times repeat across DST changes, which would reissue ids
        if not isinstance(tz, timezone):
            raise ValueError(f"tz must be a fixed-offset datetime.timezone, got {tz!r}")

        self._node = node
        self._clock = clock or SystemClock()
        self._random = random_source or SecureRandomSource()
        self._collision_checker = collision_checker or CollisionChecker()
        self._max_ids_per_ms = max_ids_per_ms
        self._retry = RetryController(max_attempts)
        self.registry = registry or ConstraintRegistry()
        self.tz = tz

    @classmethod
    def from_config(cls, config: FleetIdConfig, **kwargs) -> IdGenerator:
        """Build a generator from a loaded FleetIdConfig."""
        return cls(
            node=config.node,
            max_ids_per_ms=config.max_ids_per_ms,
            max_attempts=config.max_attempts,
            tz=config.tzinfo,
            **kwargs,
        )

    @property
    def node(self) -> int:
        return self._node

    @property
    def max_attempts(self) -> int:
        return self._retry.max_attempts

    def next_candidate(self) -> tuple[int, int]:
        """
        Reserve a collision-free (timestamp_ms, exponent) pair.

        Keeps drawing until the ledger accepts a pair. If every exponent of
        the current millisecond is taken, the loop spins until the clock
        moves to the next millisecond, which opens a fresh bucket.
        """
        checker = self._collision_checker
        with checker.lock:
            while True:
                timestamp_ms = self._clock.now_ms()
                exponent = self._random.randbelow(self._max_ids_per_ms)
                if checker.reserve(timestamp_ms, exponent):
                    return timestamp_ms, exponent

    def generate(self, prefix: str = "") -> Identifier:
        """
        Generate an id with the given prefix, without any validation.

        Args:
            prefix: Blindly prepended to the numeric part

        Returns:
            A new Identifier
        """
        timestamp_ms, exponent = self.next_candidate()
        return Identifier(
            text=format_id(prefix, timestamp_ms, self._node, exponent, self.tz),
            node=self._node,
            exponent=exponent,
            generated_at=to_datetime(timestamp_ms, self.tz),
        )

    def attempt_with_constraints(
        self,
        prefix: str,
        constraints: Sequence[IdValidationConstraint] | None = None,
        skip_global: bool = False,
    ) -> RetryOutcome:
        """
        Generate a constrained id and report how the attempt loop ended.

        Args:
            prefix: Id prefix
            constraints: Local constraints, checked after the global ones
            skip_global: Ignore globally registered constraints

        Returns:
            RetryOutcome with the terminal state, attempt count and id
        """
        global_constraints = self.registry.global_constraints

        def attempt() -> GenerationAttempt:
            identifier = self.generate(prefix)
            state = classify(
                identifier,
                constraints,
                global_constraints=global_constraints,
                skip_global=skip_global,
            )
            return GenerationAttempt(identifier=identifier, state=state)

        outcome = self._retry.run(attempt, label=prefix)
        logger.debug(
            "Constrained generation for prefix %r ended %s after %d attempt(s)",
            prefix,
            outcome.state.value,
            outcome.attempts,
        )
        return outcome

    def generate_with_constraints(
        self,
        prefix: str,
        constraints: Sequence[IdValidationConstraint] | None = None,
        skip_global: bool = False,
    ) -> Identifier | None:
        """
        Generate an id that satisfies global and the given constraints.

        Returns:
            The id, or None if a fail-fast constraint rejected a candidate,
            the attempt budget ran out, or a constraint raised
        """
        return self.attempt_with_constraints(prefix, constraints, skip_global).identifier

    def generate_for_domain(
        self,
        prefix: str,
        domain: str,
        skip_global: bool = True,
    ) -> Identifier | None:
        """
        Generate an id that satisfies the constraints registered for ``domain``.

        Global constraints are skipped unless ``skip_global`` is False. An
        unknown domain has no constraints, so any candidate is accepted.
        """
        return self.generate_with_constraints(
            prefix,
            self.registry.domain_constraints(domain),
            skip_global,
        )

    def parse(self, text: str | None) -> Identifier | None:
        """Decode an id string rendered in this generator's timezone."""
        return parse_id(text, self.tz)

    def register_global_constraints(
        self, constraints: Sequence[IdValidationConstraint] | None
    ) -> None:
        self.registry.register_global(constraints)

    def register_domain_constraints(
        self, domain: str, constraints: Sequence[IdValidationConstraint] | None
    ) -> None:
        self.registry.register_domain(domain, constraints)

    def clean_up(self) -> None:
        """Drop every registered constraint."""
        self.registry.clear()


__all__ = ["IdGenerator"]
