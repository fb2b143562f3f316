from __future__ import annotations

import logging
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, RedirectResponse

from crmpro.config import get_settings
from crmpro.errors import CrmError
from crmpro.logging_utils import setup_logging
from crmpro.routes import assign, customers, doings, imports, settings
from crmpro.services.session import ReconciliationSession
from crmpro.store import CustomerStore

logger = logging.getLogger(__name__)


def create_app(db_path: Path | None = None) -> FastAPI:
    setup_logging(get_settings().log_level)
    store = CustomerStore(db_path)

    app = FastAPI(title="CRM Pro")
    app.state.store = store
    app.state.session = ReconciliationSession(store)

    app.include_router(customers.router)
    app.include_router(doings.router)
    app.include_router(assign.router)
    app.include_router(imports.router)
    app.include_router(settings.router)

    @app.exception_handler(CrmError)
    async def crm_error(request: Request, exc: CrmError):
        if exc.status_code >= 500:
            logger.warning("%s %s failed: %s", request.method, request.url.path, exc)
        return JSONResponse({"detail": str(exc)}, status_code=exc.status_code)

    @app.get("/")
    async def index(request: Request):
        return RedirectResponse(url="/doings", status_code=302)

    return app
