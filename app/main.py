# app/main.py
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from app.api.api_router import api_router
from app.core.config import settings
from app.db import init_db
import logging
from app.core.logging import configure_logging

configure_logging()

app = FastAPI(title=settings.APP_NAME, version="0.1.0", debug=settings.DEBUG)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router, prefix="/api")


@app.on_event("startup")
def on_startup():
    logging.info("Starting up: checking database schema...")
    added = init_db.ensure_schema()
    if added:
        logging.info(f"Upgraded schema, added columns: {', '.join(added)}")
    logging.info("Startup complete")


@app.get("/health")
def health_check():
    return {"status": "healthy", "app": settings.APP_NAME}
