import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse

from . import models  # noqa: F401  registers tables on Base.metadata
from .api import api_booking, api_folio, api_groups, api_participants, api_rates, api_rooms
from .core.config import settings
from .core.observability import setup_logging, setup_tracer
from .database import Base, engine
from .utils.errors import ReservationError
from .utils.status_logger import register_status_listeners

setup_logging()
logger = logging.getLogger(__name__)

register_status_listeners()
Base.metadata.create_all(bind=engine)

# Always use ORJSONResponse for JSON payloads.
app = FastAPI(title="Reservation Core API", default_response_class=ORJSONResponse)
setup_tracer(app)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/healthz", tags=["health"])
async def healthz():
    return {"status": "ok"}


@app.exception_handler(ReservationError)
async def reservation_exception_handler(request: Request, exc: ReservationError):
    """Render domain errors as ``{"detail": {"message", "code", "field_errors"}}``."""
    http_exc = exc.as_http_exception()
    return ORJSONResponse(status_code=http_exc.status_code, content={"detail": exc.to_detail()})


def _jsonable_errors(errors):
    # ctx may carry exception instances that orjson cannot serialize
    return [{k: (str(v) if k == "ctx" else v) for k, v in err.items()} for err in errors]


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Return validation errors with details and log them for debugging."""
    errors = exc.errors()
    logger.warning("Validation error at %s: %s", request.url.path, errors)
    return ORJSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"detail": _jsonable_errors(errors)},
    )


api_prefix = settings.API_V1_STR

app.include_router(api_rates.router, prefix=api_prefix)
app.include_router(api_booking.router, prefix=api_prefix)
app.include_router(api_rooms.router, prefix=api_prefix)
app.include_router(api_participants.router, prefix=api_prefix)
app.include_router(api_folio.router, prefix=api_prefix)
app.include_router(api_groups.router, prefix=api_prefix)
