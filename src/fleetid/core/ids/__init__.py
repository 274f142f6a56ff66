"""
Id system for node-stamped, millisecond-sortable identifiers.

Ids look like ``{prefix}{yyMMddHHmmssSSS}{node:04d}{exponent:03d}``: a free
prefix, the generation time to the millisecond, the originating node and a
random disambiguator that keeps ids minted in the same millisecond apart.

Public API:
    Models:
        - Identifier: A generated or parsed id
        - IdValidationState: Verdict of a constraint check

    Process-wide functions:
        - initialize: Set the node number (and optionally constraints)
        - generate: Generate an id without constraints
        - generate_with_constraints: Generate an id satisfying constraints
        - generate_for_domain: Generate an id satisfying a domain's constraints
        - parse: Decode an id string
        - register_global_constraints: Add constraints for every request
        - register_domain_constraints: Add constraints for a domain
        - clean_up: Drop all registered constraints

    Building blocks:
        - IdGenerator: Injectable generator (no global state)
        - CollisionChecker: Per-millisecond collision ledger
        - RetryController: Bounded attempt loop
        - IdValidationConstraint, FunctionConstraint: Constraint types
        - PartitionValidator, HashCodeKeyPartitioner: Shard-targeting constraint

Example:
    >>> from fleetid.core.ids import initialize, generate, parse
    >>> _ = initialize(node=7)
    >>> order_id = generate("ORD")
    >>> parse(order_id.text).node
    7
"""

from fleetid.core.ids.api import (
    clean_up,
    generate,
    generate_for_domain,
    generate_with_constraints,
    get_generator,
    initialize,
    parse,
    register_domain_constraints,
    register_global_constraints,
)
from fleetid.core.ids.clock import SecureRandomSource, SystemClock
from fleetid.core.ids.collision import CollisionChecker
from fleetid.core.ids.constraints import (
    ConstraintRegistry,
    FunctionConstraint,
    IdValidationConstraint,
    InvalidConstraintsError,
    classify,
)
from fleetid.core.ids.generator import IdGenerator
from fleetid.core.ids.models import (
    MINIMUM_ID_LENGTH,
    GenerationAttempt,
    Identifier,
    IdValidationState,
)
from fleetid.core.ids.parser import format_id, parse_id
from fleetid.core.ids.partition import (
    HashCodeKeyPartitioner,
    KeyPartitioner,
    PartitionValidator,
)
from fleetid.core.ids.retry import RetryController, RetryOutcome, RetryState

__all__ = [
    # Models
    "Identifier",
    "IdValidationState",
    "GenerationAttempt",
    "MINIMUM_ID_LENGTH",
    # Process-wide functions
    "initialize",
    "get_generator",
    "generate",
    "generate_with_constraints",
    "generate_for_domain",
    "parse",
    "register_global_constraints",
    "register_domain_constraints",
    "clean_up",
    # Building blocks
    "IdGenerator",
    "SystemClock",
    "SecureRandomSource",
    "CollisionChecker",
    "ConstraintRegistry",
    "IdValidationConstraint",
    "FunctionConstraint",
    "InvalidConstraintsError",
    "classify",
    "RetryController",
    "RetryOutcome",
    "RetryState",
    "format_id",
    "parse_id",
    "KeyPartitioner",
    "HashCodeKeyPartitioner",
    "PartitionValidator",
]
