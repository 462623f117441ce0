"""Observability infrastructure for the local datastore.

Provides domain probes following the Domain Oriented Observability pattern.
"""

from infrastructure.observability.probes import DatabaseProbe, DefaultDatabaseProbe

__all__ = [
    "DatabaseProbe",
    "DefaultDatabaseProbe",
]
