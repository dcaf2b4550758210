"""
Ski forecast — FastAPI application entry point.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from skiforecast.api.router import router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    client = getattr(app.state, "nws_client", None)
    if client is not None:
        await client.aclose()
        logger.info("Closed NWS client")


app = FastAPI(
    title="Ski Forecast API",
    description="Multi-resort NWS forecast aggregation into 4-hour slots",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS: allow local frontend dev server
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:5173",  # Vite default
        "http://localhost:3000",
        "http://127.0.0.1:5173",
        "http://127.0.0.1:3000",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(router)


@app.get("/health")
async def health_check():
    return {"status": "ok", "service": "skiforecast"}
