# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-10-16
# Description: main.py
# -----------------------------------------------------------------------------
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from api.dependencies import shutdown_app_container
from api.routers import health, ingest, search, stats

logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",)


@asynccontextmanager
async def lifespan(_: FastAPI):
    yield
    shutdown_app_container()


app = FastAPI(title="VMINDEX API", lifespan=lifespan)
app.include_router(health.router)
app.include_router(ingest.router)
app.include_router(search.router)
app.include_router(stats.router)


if __name__ == "__main__":
    import os

    import uvicorn

    uvicorn.run(app, host=os.getenv("VMI_API_HOST", "127.0.0.1"), port=int(os.getenv("VMI_API_PORT", "8080")))
