import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

# Import models so they're registered with SQLAlchemy Base
from . import models  # noqa: F401
from .config import ALLOWED_ORIGINS
from .database import Base, engine
from .domain.participants.router import router as participants_router
from .domain.requests.router import router as requests_router
from .exceptions import TutorPairError
from .routes.admin import router as admin_router
from .routes.status_automation import router as status_router
from .routes.timeslots import router as timeslots_router

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Reduce verbosity of third-party libraries
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Application starting up...")
    try:
        Base.metadata.create_all(bind=engine, checkfirst=True)
        logger.info("Database tables created successfully")
    except Exception as e:
        logger.error(f"Failed to create database tables: {e}")
        raise

    yield
    logger.info("Application shutting down...")


app = FastAPI(title="TutorPair API", version="1.0.0", lifespan=lifespan)


@app.exception_handler(TutorPairError)
async def tutorpair_exception_handler(request: Request, exc: TutorPairError):
    """Translate domain errors into JSON responses with their status code"""
    logger.warning(f"{request.method} {request.url.path} - {exc.status_code}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


logger.info(f"CORS allowed origins: {ALLOWED_ORIGINS}")

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=["*"],
)

# Routes
app.include_router(participants_router)
app.include_router(requests_router)
app.include_router(admin_router)
app.include_router(status_router)
app.include_router(timeslots_router)


@app.get("/")
def root():
    return {"message": "TutorPair API is running"}


@app.get("/health")
def health():
    return {"status": "healthy"}
