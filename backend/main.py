import os

from fastapi.openapi.utils import get_openapi
from dotenv import load_dotenv
from reservation_core.main import app

# Load environment variables for development
load_dotenv()


def custom_openapi() -> dict:
    """Return OpenAPI schema with project metadata."""
    if app.openapi_schema:
        return app.openapi_schema
    app.openapi_schema = get_openapi(
        title="Reservation Core API",
        version="1.0.0",
        description="Booking lifecycle, nightly rate resolution and folio ledger for a hotel property.",
        routes=app.routes,
    )
    return app.openapi_schema


app.openapi = custom_openapi

if __name__ == "__main__":
    import uvicorn

    workers = int(os.getenv("UVICORN_WORKERS", "1"))
    uvicorn.run(
        "reservation_core.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        workers=workers,
    )
