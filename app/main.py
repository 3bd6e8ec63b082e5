import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.core.config import settings
from app.core.database import store
from app.core.exceptions import ConfigurationError, QuestionValidationError
from app.api.router import api_router

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


# Close the store's connection pool once the app shuts down
@asynccontextmanager
async def lifespan(app: FastAPI):
    if not settings.llm_configured:
        logger.warning("Azure OpenAI settings are incomplete; medical queries will fail")
    if not store.configured:
        logger.warning("SQL_DATABASE_URL is not set; medical queries will fail")

    yield
    await store.dispose()


app = FastAPI(title="Medical Query API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "DELETE", "PUT"],
    allow_headers=["*"],
)


@app.exception_handler(QuestionValidationError)
async def question_validation_handler(request: Request, exc: QuestionValidationError):
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST, content={"error": str(exc)}
    )


@app.exception_handler(ConfigurationError)
async def configuration_error_handler(request: Request, exc: ConfigurationError):
    logger.error(f"Service unavailable: {exc}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "Medical query service is not configured", "details": str(exc)},
    )


# Include the master router containing all our endpoints
app.include_router(api_router)


@app.get("/")
async def root():
    return {"message": "Welcome to the Medical Query API"}
