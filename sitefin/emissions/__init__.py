"""EASIUR emissions health-cost module (projection, datasets, site lookups)."""

from .projection import project, unproject, to_grid_index
from .easiur import EmissionsCostGrid, EmissionsGridCache, load_grid
from .costs import Found, NotAvailable, resolve_costs, resolve_escalation

__all__ = [
    "project",
    "unproject",
    "to_grid_index",
    "EmissionsCostGrid",
    "EmissionsGridCache",
    "load_grid",
    "Found",
    "NotAvailable",
    "resolve_costs",
    "resolve_escalation",
]
