"""Scenario discovery and the public registry API.

Importing this package loads every domain module in this directory, so
a new domain only needs a module with @operation-decorated functions.

Re-exported from _registry:
    operation: decorator that registers a scenario function
    get_operations: registered operations, optionally for one domain
    pick_domain, pick_operation: the two-level weighted draw
    validate_registry: fail fast when a domain has no operations
    Domain, Operation: the domain enum and operation record
"""

import importlib
import pkgutil

from ._registry import (  # noqa: F401
    DOMAIN_WEIGHTS,
    Domain,
    Operation,
    get_operations,
    operation,
    pick_domain,
    pick_operation,
    validate_registry,
)

# Auto-discover all modules in this package to trigger @operation registration
for _info in pkgutil.iter_modules(__path__):
    if not _info.name.startswith("_"):
        importlib.import_module(f".{_info.name}", __package__)
