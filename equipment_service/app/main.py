import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from shared.core.config import settings
from shared.core.database import engine, Base
from shared.exception_handler import setup_exception_handlers

from .models.equipment import (
    brand, classification_node, equipment, equipment_transfer_history, maintenance_plan, outbox_event, sla, spare_part)
from .router.equipment import equipment_router

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s [%(levelname)s]: %(message)s"
)

app = FastAPI(title="Equipment Service API")

# Create all tables
Base.metadata.create_all(bind=engine)

origins = [o.strip() for o in settings.CORS_ORIGINS.split(",") if o.strip()]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

setup_exception_handlers(app)

# Include routers
app.include_router(equipment_router.router)
