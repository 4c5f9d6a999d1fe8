"""Journal generation and reconciliation engine for a property-management back office."""

__version__ = "0.1.0"
