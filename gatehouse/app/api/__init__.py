from .docs import create_docs_router
from .service import router as service_router

__all__ = ["create_docs_router", "service_router"]
