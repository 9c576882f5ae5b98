# hamlet/main.py
from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy import text

from hamlet.config import LOG_LEVEL
from hamlet.database import engine
from hamlet.game.errors import VillageError
from hamlet.routes.auth import router as auth_router
from hamlet.routes.villages import router as villages_router
from hamlet.routes.buildings import router as buildings_router
from hamlet.routes.catalog import router as catalog_router
from hamlet.routes.accounts import router as accounts_router
from hamlet.routes import mail

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(title="Hamlet Village Server", version="0.1.0")

app.include_router(auth_router)
app.include_router(villages_router)
app.include_router(buildings_router)
app.include_router(catalog_router)
app.include_router(accounts_router)
app.include_router(mail.router)


@app.exception_handler(VillageError)
async def village_error_handler(request: Request, exc: VillageError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.to_detail()})


@app.get("/health")
def health() -> dict:
    return {"status": "ok"}


@app.get("/db-ping")
def db_ping() -> dict:
    with engine.connect() as conn:
        result = conn.execute(text("SELECT 1")).scalar_one()
    return {"db": "ok", "select_1": result}
