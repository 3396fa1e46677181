"""
Domain Ports Package

Architectural Intent:
- Contains port interfaces (abstract contracts) for external dependencies
- Ports define what the domain needs, adapters implement how
- Follows Hexagonal Architecture principles
"""

from cutover.domain.ports.remote_operations_port import RemoteOperationsPort
from cutover.domain.ports.event_bus_port import EventBusPort

__all__ = [
    "RemoteOperationsPort",
    "EventBusPort",
]
