# imagifine/server.py
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.middleware.cors import CORSMiddleware

from imagifine.api import auth, contact, credits, root
from imagifine.core.config import CORS_ORIGINS
from imagifine.core.database import close_db, init_db
from imagifine.core.errors import AppError, ExternalServiceError
from imagifine.core.logging_config import configure_logging

configure_logging()
logger = logging.getLogger("imagifine")

app = FastAPI(title="Imagifine API")

app.include_router(root.router)
app.include_router(auth.router)
app.include_router(credits.router)
app.include_router(contact.router)

app.add_middleware(
    CORSMiddleware,
    allow_credentials=True,
    allow_origins=CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if isinstance(exc, ExternalServiceError):
        logger.error("%s on %s %s: %s", type(exc).__name__, request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.public_message})


def _first_error_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    err = errors[0]
    field = next((str(p) for p in reversed(err.get("loc", ())) if isinstance(p, str) and p != "body"), None)
    if err.get("type") == "missing" and field:
        return f"{field} is required"
    msg = str(err.get("msg", "Invalid request"))
    # pydantic prefixes messages raised from field validators
    if msg.startswith("Value error, "):
        msg = msg[len("Value error, "):]
    return f"{field}: {msg}" if field and err.get("type") != "value_error" else msg


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"detail": _first_error_message(exc)})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"detail": "Server error"})


@app.on_event("startup")
async def startup_db_client():
    await init_db()


@app.on_event("shutdown")
async def shutdown_db_client():
    await close_db()
