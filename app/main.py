from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

import config
from app.api.router import api_router

logger = logging.getLogger(__name__)

app = FastAPI(title="Draft Pick Board")


@app.on_event("startup")
def _startup_log_config() -> None:
    # Inputs are read per request; nothing to initialize besides a config trace.
    logger.info(
        "DRAFT_BOARD_STARTUP year=%s ledger_dir=%s standings=%s cache_ttl=%s",
        config.CURRENT_DRAFT_YEAR,
        config.LEDGER_DIR,
        config.STANDINGS_PATH,
        config.BOARD_CACHE_TTL_SEC,
    )


app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router)
