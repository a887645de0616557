import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from physiome.config import get_settings
from physiome.database import close_db, init_db
from physiome.exceptions import PhysioMeError, Transient
from physiome.routers import admin, appointments, contact, email_test

settings = get_settings()
logger = logging.getLogger(__name__)


def setup_logging() -> None:
    """Configure logging based on environment."""
    level = logging.DEBUG if settings.is_development else getattr(logging, settings.log_level.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    logger.info("Starting PhysioMe API in %s mode", settings.node_env)
    await init_db()
    yield
    await close_db()
    logger.info("Shutdown complete")


app = FastAPI(
    title="PhysioMe API",
    description="Admin user management and transactional email for PhysioMe",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.frontend_url],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class NoCacheMiddleware(BaseHTTPMiddleware):
    """Admin data must never be served from a browser cache."""
    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        response.headers["Cache-Control"] = "no-store, no-cache, must-revalidate, proxy-revalidate, max-age=0"
        response.headers["Expires"] = "0"
        response.headers["Pragma"] = "no-cache"
        return response


app.add_middleware(NoCacheMiddleware)


@app.exception_handler(PhysioMeError)
async def physiome_error_handler(request: Request, exc: PhysioMeError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"success": False, "message": exc.message})


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.warning("Validation error on %s: %s", request.url.path, exc.errors())
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "success": False,
            "message": "Invalid request",
            "errors": [{"loc": list(e["loc"]), "msg": e["msg"]} for e in exc.errors()],
        },
    )


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    user = getattr(request.state, "user", None)
    logger.exception(
        "Unhandled error on %s %s (user=%s)",
        request.method, request.url.path, user.id if user else "anonymous",
    )
    return await physiome_error_handler(request, Transient(str(exc)))


app.include_router(admin.router, prefix="/api/admin", tags=["Admin"])
app.include_router(appointments.router, prefix="/api/appointments", tags=["Appointments"])
app.include_router(contact.router, prefix="/api/contact", tags=["Contact"])
app.include_router(email_test.router, prefix="/api/test", tags=["Email Test"])


@app.get("/api/health")
async def health_check():
    return {"status": "healthy", "service": "physiome-api"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("physiome.main:app", host="0.0.0.0", port=8080, reload=settings.is_development)
