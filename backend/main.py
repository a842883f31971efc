import os

from dotenv import load_dotenv
from fastapi.openapi.utils import get_openapi

# settings read the environment at import time
load_dotenv()

from hall_service.main import app  # noqa: E402

OPENAPI_TAGS = [
    {"name": "halls", "description": "Hall inventory and availability blocks."},
    {"name": "quotations", "description": "Priced offers and their conversion to bookings."},
    {"name": "bookings", "description": "Reservations and their lifecycle transitions."},
]


def custom_openapi() -> dict:
    if app.openapi_schema:
        return app.openapi_schema
    app.openapi_schema = get_openapi(
        title="Hall Reservation API",
        version="1.0.0",
        description="Hall availability, quotations and the booking lifecycle.",
        routes=app.routes,
        tags=OPENAPI_TAGS,
    )
    return app.openapi_schema


app.openapi = custom_openapi

if __name__ == "__main__":
    import uvicorn

    workers = int(os.getenv("UVICORN_WORKERS", "1"))
    uvicorn.run(
        "hall_service.main:app",
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "8000")),
        reload=workers == 1,
        workers=workers,
    )
