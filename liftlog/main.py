import uuid

import structlog
from asgi_correlation_id import CorrelationIdMiddleware
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from liftlog.core.config import settings
from liftlog.core.logging_config import configure_logging
from liftlog.models import registry  # noqa: F401
from liftlog.routers.analytics import router as analytics_router
from liftlog.routers.auth import router as auth_router
from liftlog.routers.circuits import router as circuits_router
from liftlog.routers.exercises import router as exercises_router
from liftlog.routers.me import router as me_router
from liftlog.routers.schedule import router as schedule_router
from liftlog.routers.sessions import router as sessions_router
from liftlog.routers.supplements import router as supplements_router
from liftlog.routers.templates import router as templates_router
from liftlog.routers.weight import router as weight_router

configure_logging()
logger = structlog.get_logger(__name__)

app = FastAPI(title="LiftLog API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(
    CorrelationIdMiddleware,
    header_name="X-Request-ID",
    generator=lambda: str(uuid.uuid4()),
    update_request_header=True,
)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    messages = []
    for err in errors:
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        messages.append(f"{loc}: {err.get('msg')}" if loc else err.get("msg", "Invalid request"))
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": "; ".join(messages) or "Invalid request"},
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("unhandled_error", path=request.url.path, method=request.method)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )


app.include_router(auth_router)
app.include_router(me_router)
app.include_router(exercises_router)
app.include_router(circuits_router)
app.include_router(templates_router)
app.include_router(schedule_router)
app.include_router(sessions_router)
app.include_router(supplements_router)
app.include_router(weight_router)
app.include_router(analytics_router)


@app.get("/health")
def health():
    return {"ok": True}
