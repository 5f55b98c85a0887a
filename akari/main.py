"""
Entry point de la API
"""

import logging
import re
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response
from pymongo.errors import PyMongoError
from starlette.middleware.base import BaseHTTPMiddleware

from akari.core.config import get_settings
from akari.core.errors import AkariError, InternalError
from akari.database import Database

from akari.controllers.auth_controller import router as auth_router
from akari.controllers.predictions_controller import router as predictions_router
from akari.controllers.rewards_controller import router as rewards_router
from akari.controllers.leaderboard_controller import router as leaderboard_router
from akari.controllers.campaigns_controller import router as campaigns_router
from akari.controllers.admin_controller import router as admin_router
from akari.controllers.health_controller import router as health_router

settings = get_settings()

logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

# Parse CORS origins
CORS_ORIGINS = [origin.strip() for origin in settings.cors_origins.split(",")]
# El Mini App de Telegram se sirve desde Vercel
CORS_ORIGIN_REGEX = re.compile(r"https://.*\.vercel\.app") if settings.app_env == "production" else None


def is_allowed_origin(origin: str) -> bool:
    """Check if origin is allowed by explicit list or regex pattern."""
    if not origin:
        return False
    if origin in CORS_ORIGINS:
        return True
    if CORS_ORIGIN_REGEX and CORS_ORIGIN_REGEX.match(origin):
        return True
    return False


class CORSMiddleware(BaseHTTPMiddleware):
    """
    CORS middleware that answers OPTIONS preflight before routing,
    so body/query validation never turns a preflight into a 4xx.
    """

    async def dispatch(self, request: Request, call_next):
        origin = request.headers.get("origin", "")

        if request.method == "OPTIONS":
            if not is_allowed_origin(origin):
                return Response(status_code=403, content="Origin not allowed")
            return Response(
                status_code=200,
                headers={
                    "Access-Control-Allow-Origin": origin,
                    "Access-Control-Allow-Methods": "GET, POST, PUT, DELETE, OPTIONS, PATCH",
                    "Access-Control-Allow-Headers": "Authorization, Content-Type, Accept, Origin, X-Requested-With",
                    "Access-Control-Allow-Credentials": "true",
                    "Access-Control-Max-Age": "86400",
                }
            )

        response = await call_next(request)

        if is_allowed_origin(origin):
            response.headers["Access-Control-Allow-Origin"] = origin
            response.headers["Access-Control-Allow-Credentials"] = "true"

        return response


@asynccontextmanager
async def lifespan(app: FastAPI):
    await Database.connect()
    yield
    await Database.disconnect()

# Creo la app
app = FastAPI(
    title="AKARI API",
    description="Backend de AKARI: puntos, predicciones, rewards MYST y campañas",
    version="1.0.0",
    lifespan=lifespan
)

app.add_middleware(CORSMiddleware)

# Agrego todos los routers de los controllers al app
app.include_router(health_router)
app.include_router(auth_router)
app.include_router(predictions_router)
app.include_router(rewards_router)
app.include_router(leaderboard_router)
app.include_router(campaigns_router)
app.include_router(admin_router)


@app.exception_handler(AkariError)
async def akari_error_handler(request: Request, exc: AkariError):
    # Errores de dominio -> {"reason": ...} con el status que corresponde
    if exc.status_code >= 500:
        logger.error(f"❌ {request.method} {request.url.path}: {exc.reason}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"reason": exc.reason}
    )


@app.exception_handler(PyMongoError)
async def database_error_handler(request: Request, exc: PyMongoError):
    # Fallas de Mongo fuera del dominio: 500 con el mismo formato
    error = InternalError("Database error")
    logger.error(f"❌ {request.method} {request.url.path}: {type(exc).__name__}: {exc}")
    return JSONResponse(
        status_code=error.status_code,
        content={"reason": error.reason}
    )


@app.get("/")
async def root():
    # Endpoint raíz, sirve para verificar que la API está levantada
    return {
        "name": "AKARI API",
        "version": "1.0.0",
        "docs": "/docs"
    }
