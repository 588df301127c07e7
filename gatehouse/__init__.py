"""
Gatehouse - A GraphQL gateway bootstrap for FastAPI.

Gatehouse composes independently authored GraphQL fragments into one
servable API:

- **Fragment Composition**: SDL fragments merged with conflict detection,
  resolver fragments merged last-write-wins
- **Lazy Engine Startup**: the GraphQL engine starts once, on first use,
  shared by every concurrent request
- **Request-Aware Docs**: Swagger UI whose server URL matches the address
  the caller used
- **CORS Policy**: environment-driven allow-list plus loopback origins

Quick Start:
    >>> from gatehouse import create_app
    >>> app = create_app()

Run:
    $ gatehouse            # or: uvicorn gatehouse.app.main:app
"""

__version__ = "1.1.0"
__license__ = "MIT"

from gatehouse.app import create_app
from gatehouse.errors import CompositionError, ConfigurationWarning, GatewayError, StartupError

__all__ = [
    "__version__",
    "__license__",
    "create_app",
    "CompositionError",
    "ConfigurationWarning",
    "GatewayError",
    "StartupError",
]
