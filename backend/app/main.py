# backend/app/main.py
from __future__ import annotations

from fastapi import FastAPI

from .config import APP_TITLE
from .lifespan import app_lifespan
from .metrics import metrics
from .routes import api_v1, root_router
from .services import get_services

app = FastAPI(title=APP_TITLE, lifespan=app_lifespan)

app.include_router(root_router)
app.include_router(api_v1)

__all__ = [
    'app',
    'get_services',
    'metrics',
]
