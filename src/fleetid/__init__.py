"""
fleetid - Node-stamped, millisecond-sortable identifiers.

Generates short ids that sort by creation time and stay unique across a
fleet of service instances without a shared store.
"""

__version__ = "0.1.0"

# Re-export the process-wide API for convenience
from fleetid.core.ids import Identifier, IdGenerator, generate, initialize, parse

__all__ = ["Identifier", "IdGenerator", "generate", "initialize", "parse", "__version__"]
