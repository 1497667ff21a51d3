from fastapi import APIRouter

from .core import health_router, status_router
from .root import router as root_router

api_v1 = APIRouter(prefix='/api/v1')
api_v1.include_router(status_router)
api_v1.include_router(health_router)

__all__ = ['api_v1', 'root_router']
