import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from .core.database import engine, Base
from .core.config import settings
from .core.errors import SparkNestError, StorageUnavailable, ValidationFailed
from .models.user import User
from .models.otp import OTPRecord
from .models.note import Note
from .routers.auth import router as auth_router
from .routers.notes import router as notes_router
from .routers.users import router as users_router
from .services.auth import purge_expired_codes

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


async def _purge_loop(interval: int):
    while True:
        await asyncio.sleep(interval)
        try:
            await run_in_threadpool(purge_expired_codes)
        except StorageUnavailable:
            # Best effort, the next tick tries again
            logger.warning("Expired OTP purge skipped: storage unavailable")
        except Exception:
            logger.exception("Expired OTP purge failed")


@asynccontextmanager
async def lifespan(app: FastAPI):
    Base.metadata.create_all(bind=engine)
    purge_task = None
    if settings.OTP_CLEANUP_INTERVAL_SECONDS > 0:
        purge_task = asyncio.create_task(_purge_loop(settings.OTP_CLEANUP_INTERVAL_SECONDS))
    yield
    if purge_task:
        purge_task.cancel()
        try:
            await purge_task
        except asyncio.CancelledError:
            pass


app = FastAPI(title=settings.APP_NAME, lifespan=lifespan)

# Configure CORS
raw_origins = settings.CORS_ORIGINS or "*"
origins = [o.strip() for o in raw_origins.split(",") if o.strip()]
allow_credentials = False if "*" in origins else True
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=allow_credentials,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(SparkNestError)
async def sparknest_error_handler(request: Request, exc: SparkNestError):
    content = {"message": exc.message}
    if isinstance(exc, ValidationFailed):
        content["errors"] = exc.errors
    return JSONResponse(status_code=exc.status_code, content=content)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg", ""), "type": err.get("type", "")}
        for err in exc.errors()
    ]
    return await sparknest_error_handler(request, ValidationFailed(errors=errors))


# Routers
app.include_router(auth_router)
app.include_router(users_router)
app.include_router(notes_router)

@app.get("/")
def root():
    return {"status": "ok"}

@app.get("/health")
def health():
    return {"status": "healthy"}
