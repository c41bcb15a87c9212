from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy import text

from shared.config.database import Base, engine
from shared.observability.setup import setup_observability

from .dependencies import event_bus
from .exceptions import PaymentServiceError
from .listeners import register_listeners
from .models import Payment # Import to register with Base
from .router import router, public_router


payment_app = FastAPI(title="Payment Service", version="3.0.0")

# Structured logs, OTLP traces and /metrics
setup_observability(payment_app, "payment_service")

# Health first so GET /health is not captured by GET /{payment_id}
payment_app.include_router(public_router)
payment_app.include_router(router)

register_listeners(event_bus)


@payment_app.exception_handler(PaymentServiceError)
async def payment_error_handler(request: Request, exc: PaymentServiceError):
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.to_dict()})


@payment_app.on_event("startup")
async def startup_event():
    async with engine.begin() as conn:
        await conn.execute(text("CREATE SCHEMA IF NOT EXISTS payment_schema"))
        await conn.run_sync(Base.metadata.create_all)


@payment_app.on_event("shutdown")
async def shutdown_event():
    # Let in-flight listener deliveries finish before the loop goes away
    await event_bus.drain()
