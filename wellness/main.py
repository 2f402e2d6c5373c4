from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import logging

from wellness.api import auth, habits, admin, programmes, integrations
from wellness.core.config import settings
from wellness.core.errors import HabitServiceError, StorageFailureError
from wellness.core.logging import configure_logging

configure_logging()
logger = logging.getLogger(__name__)

app = FastAPI(title="Wellness Coach API", version="1.0.0")

# CORS headers are added even on errors via the exception handlers below
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_allowed_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["*"],
)


def _with_cors(request: Request, response: JSONResponse) -> JSONResponse:
    origin = request.headers.get("origin")
    if origin and origin in settings.get_allowed_origins():
        response.headers["Access-Control-Allow-Origin"] = origin
        response.headers["Access-Control-Allow-Credentials"] = "true"
        response.headers["Access-Control-Allow-Methods"] = "*"
        response.headers["Access-Control-Allow-Headers"] = "*"
    return response


@app.exception_handler(HabitServiceError)
async def habit_service_error_handler(request: Request, exc: HabitServiceError):
    if exc.status_code >= 500:
        logger.error(f"[{exc.code}] {request.method} {request.url.path}: {exc.message}")

    message = exc.message
    if isinstance(exc, StorageFailureError) and settings.is_production:
        message = "A storage error occurred. Please try again later."

    content = {"detail": message, "code": exc.code}
    if exc.details and not settings.is_production:
        content["details"] = exc.details
    return _with_cors(request, JSONResponse(status_code=exc.status_code, content=content))


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Ensure CORS headers are included even on unhandled exceptions"""
    logger.exception(f"Unhandled exception on {request.method} {request.url.path}")

    detail = "Internal server error" if settings.is_production else f"Internal server error: {str(exc)}"
    return _with_cors(request, JSONResponse(status_code=500, content={"detail": detail}))


app.include_router(auth.router, prefix="/auth", tags=["auth"])
app.include_router(habits.router, prefix="/habits", tags=["habits"])
app.include_router(programmes.router, prefix="/programmes", tags=["programmes"])
app.include_router(admin.router, prefix="/admin", tags=["admin"])
app.include_router(integrations.router, prefix="/integrations", tags=["integrations"])


@app.get("/")
async def root():
    return {"message": "Wellness Coach API", "version": "1.0.0"}


@app.get("/health")
async def health():
    return {"status": "healthy"}
