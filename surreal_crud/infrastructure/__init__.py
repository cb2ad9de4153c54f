"""
Infrastructure package for surreal-crud.

Centralizes database connectivity concerns (client construction, sign-in,
namespace selection and handle lifecycle). Keep this layer focused on I/O and
resource management, decoupled from query building and record services.
"""

from surreal_crud.infrastructure.connection import ClientFactory, ConnectionManager, connect

__all__ = [
    "ClientFactory",
    "ConnectionManager",
    "connect",
]
