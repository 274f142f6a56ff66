"""
Process-wide id generation API.

Most services mint ids from one place per process. This module keeps a
default ``IdGenerator`` for them, so callers can do::

    from fleetid.core.ids import initialize, generate

    initialize(node=7)
    order_id = generate("ORD")

The collision ledger and the constraint registry are module-level and
survive re-initialization: ``initialize`` only swaps the node (and the
settings from config), never the uniqueness bookkeeping.

If ``initialize`` is never called, the first use builds the default
generator from ``load_config()`` (defaults < user config < project config <
FLEETID_* env vars).
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Mapping, Sequence

from pydantic import ValidationError

from fleetid.core.ids.collision import CollisionChecker
from fleetid.core.ids.constraints import ConstraintRegistry, IdValidationConstraint
from fleetid.core.ids.generator import IdGenerator
from fleetid.core.ids.models import Identifier
from fleetid.core.ids.parser import parse_id

logger = logging.getLogger(__name__)

_collision_checker = CollisionChecker()
_registry = ConstraintRegistry()
_generator: IdGenerator | None = None
_init_lock = threading.Lock()


def initialize(
    node: int,
    global_constraints: Sequence[IdValidationConstraint] | None = None,
    domain_constraints: Mapping[str, Sequence[IdValidationConstraint]] | None = None,
) -> IdGenerator:
    """
    Set the node number for this process, optionally registering constraints.

    Calling it again with the same or a different node is allowed; the
    collision ledger is kept.

    The remaining settings (disambiguator space, attempt ceiling, timezone)
    come from ``load_config()``. If the configuration cannot be loaded, a
    warning is logged and the defaults are used, so a broken ``FLEETID_*``
    variable never prevents an explicit node from taking effect.

    Args:
        node: Node number (0-9999), assigned by whatever the host uses for
            cluster membership
        global_constraints: Replaces the global constraint list when given.
            ``None`` leaves the currently registered global constraints in
            place; pass an empty list to drop them.
        domain_constraints: Replaces the list of each domain it names;
            domains it does not name keep their constraints

    Returns:
        The new default generator

    Raises:
        ValueError: If node is out of range
    """
    global _generator

    from fleetid.core.config import ConfigError, FleetIdConfig, load_config

    try:
        config = load_config()
    except (ConfigError, ValidationError) as e:
        logger.warning("Ignoring unusable config, using defaults for node %d: %s", node, e)
        config = FleetIdConfig()

    generator = IdGenerator(
        node=node,
        collision_checker=_collision_checker,
        registry=_registry,
        max_ids_per_ms=config.max_ids_per_ms,
        max_attempts=config.max_attempts,
        tz=config.tzinfo,
    )
    _registry.replace(global_constraints, domain_constraints)

    with _init_lock:
        _generator = generator
    logger.info("Id generation initialized for node %d", node)
    return generator


def get_generator() -> IdGenerator:
    """
    Return the default generator, building it from config if needed.

    Raises:
        ConfigError: If a config file or FLEETID_* override is unusable
        ValidationError: If the merged config is out of range
    """
    global _generator

    if _generator is not None:
        return _generator

    from fleetid.core.config.loader import load_config

    with _init_lock:
        if _generator is None:
            config = load_config()
            _generator = IdGenerator.from_config(
                config,
                collision_checker=_collision_checker,
                registry=_registry,
            )
            logger.info("Id generation using configured node %d", config.node)
        return _generator


def _configured_generator(action: str) -> IdGenerator | None:
    """Like get_generator, but logs config failures and returns None."""
    from fleetid.core.config.loader import ConfigError

    try:
        return get_generator()
    except (ConfigError, ValidationError) as e:
        logger.warning("Cannot %s, id generation config is unusable: %s", action, e)
        return None


def register_global_constraints(
    constraints: Sequence[IdValidationConstraint] | None,
) -> None:
    """
    Append constraints applied to every constrained generation request.

    Raises:
        InvalidConstraintsError: If ``constraints`` is None or empty
    """
    _registry.register_global(constraints)


def register_domain_constraints(
    domain: str,
    constraints: Sequence[IdValidationConstraint] | None,
) -> None:
    """
    Append constraints for ``domain``.

    Raises:
        InvalidConstraintsError: If ``constraints`` is None or empty
    """
    _registry.register_domain(domain, constraints)


def generate(prefix: str = "") -> Identifier:
    """
    Generate an id with no constraint checking.

    Raises:
        ConfigError, ValidationError: If the default generator has to be
            built from a broken configuration
    """
    return get_generator().generate(prefix)


def generate_for_domain(
    prefix: str,
    domain: str,
    skip_global: bool = True,
) -> Identifier | None:
    """
    Generate an id satisfying the constraints registered for ``domain``.

    Returns None when no valid id could be produced, including when the
    default generator cannot be built from the configuration.
    """
    generator = _configured_generator("generate id")
    if generator is None:
        return None
    return generator.generate_for_domain(prefix, domain, skip_global)


def generate_with_constraints(
    prefix: str,
    constraints: Sequence[IdValidationConstraint] | None,
    skip_global: bool = False,
) -> Identifier | None:
    """
    Generate an id satisfying global constraints and ``constraints``.

    Returns None when no valid id could be produced, including when the
    default generator cannot be built from the configuration.
    """
    generator = _configured_generator("generate id")
    if generator is None:
        return None
    return generator.generate_with_constraints(prefix, constraints, skip_global)


def parse(text: str | None) -> Identifier | None:
    """
    Decode an id string; None if it is not a well-formed id.

    Never raises. If the configuration cannot be loaded the timestamp is
    read as UTC.
    """
    generator = _configured_generator("use configured timezone")
    if generator is None:
        return parse_id(text)
    return generator.parse(text)


def clean_up() -> None:
    """Drop every registered constraint."""
    _registry.clear()


def reset() -> None:
    """
    Forget the default generator, constraints and collision ledger.

    Intended for tests; production code should not need it.
    """
    global _generator

    with _init_lock:
        _generator = None
    _registry.clear()
    _collision_checker.reset()


__all__ = [
    "clean_up",
    "generate",
    "generate_for_domain",
    "generate_with_constraints",
    "get_generator",
    "initialize",
    "parse",
    "register_domain_constraints",
    "register_global_constraints",
    "reset",
]
