from fastapi import FastAPI
from sqlalchemy import text
from shared.config.database import engine, Base

# IMPORTANT: import models so they register with Base
from services.payment_service import models as payment_models

from services.payment_service.dependencies import event_bus
from services.payment_service.main import payment_app

app = FastAPI(title="Payments Cluster")

# Mounted apps do not get their own startup/shutdown events, the root runs them
@app.on_event("startup")
async def startup_event():
    async with engine.begin() as conn:
        await conn.execute(text("CREATE SCHEMA IF NOT EXISTS payment_schema"))
        await conn.run_sync(Base.metadata.create_all)

@app.on_event("shutdown")
async def shutdown_event():
    await event_bus.drain()

app.mount("/payments", payment_app)
