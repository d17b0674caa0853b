# booking_service/main.py

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from booking_service.config import ALLOWED_ORIGINS
from booking_service.logging_config import setup_logging
from booking_service.middleware import RequestIDMiddleware
from booking_service.routes.bookings import router as bookings_router
from booking_service.routes.health import router as health_router
from booking_service.routes.metrics import router as metrics_router
from booking_service.routes.payments import router as payments_router

# Initialize structured logging
setup_logging()
logger = structlog.get_logger(__name__)

app = FastAPI(
    title="Booking Service API",
    description="Lodging and tourist experience bookings with payments and email confirmations",
    version="1.0.0",
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS if "*" not in ALLOWED_ORIGINS else ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestIDMiddleware)

# Register routers
app.include_router(health_router, tags=["Health"])
app.include_router(metrics_router, tags=["Metrics"])
app.include_router(bookings_router, tags=["Bookings"])
app.include_router(payments_router, tags=["Payments"])


@app.on_event("startup")
def startup_event() -> None:
    """Start the notification worker."""
    from booking_service.services.notification_queue import notification_queue

    logger.info("FastAPI application starting up...")
    notification_queue.start()
    logger.info("FastAPI application initialized")


@app.on_event("shutdown")
def shutdown_event() -> None:
    """Drain and stop the notification worker."""
    from booking_service.services.notification_queue import notification_queue

    notification_queue.stop()
    logger.info("FastAPI application shut down")
