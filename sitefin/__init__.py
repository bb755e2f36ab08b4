"""Financial and health-cost parameters for distributed energy optimisation models."""

__version__ = "0.1.0"
