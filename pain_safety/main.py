"""
Pain Safety Service - FastAPI Application

Main application entry point with API endpoints for:
- MME totals and threshold flags
- Opioid interaction / organ-function safety checks
- Misuse risk assessment
- Report export (JSON, CSV, PDF)
"""
from contextlib import asynccontextmanager
from datetime import datetime

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from pain_safety import config
from pain_safety.core.clinical import InteractionRuleEvaluator
from pain_safety.models.pain import HealthResponse
from pain_safety.routes import pain_router
from pain_safety.utils import PainSafetyError, get_logger, setup_logging

logger = get_logger(__name__)

START_TIME = datetime.now()


# ---- Application Lifespan ----

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Configure logging on startup."""
    setup_logging(level=config.LOG_LEVEL, log_file=config.LOG_FILE or None)
    rules = InteractionRuleEvaluator.registered_rules()
    logger.info(f"Pain Safety API v{config.API_VERSION} ready ({len(rules)} interaction rules)")
    yield
    logger.info("Pain Safety API shut down.")


# ---- FastAPI Application ----

app = FastAPI(
    title="Pain Safety API",
    description="Opioid MME aggregation and interaction rule checks for pain management",
    version=config.API_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(pain_router)


@app.exception_handler(PainSafetyError)
async def pain_safety_error_handler(request: Request, exc: PainSafetyError):
    logger.warning(f"{request.method} {request.url.path} -> {exc.code}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


# ---- Health ----

def _health() -> HealthResponse:
    return HealthResponse(
        status="healthy",
        version=config.API_VERSION,
        timestamp=datetime.now().isoformat(),
        uptime_seconds=(datetime.now() - START_TIME).total_seconds(),
        rules=InteractionRuleEvaluator.registered_rules(),
    )


@app.get("/", response_model=HealthResponse, tags=["Health"])
async def root():
    """API root - health check."""
    return _health()


@app.get("/health", response_model=HealthResponse, tags=["Health"])
async def health_check():
    """Health check endpoint."""
    return _health()


# ---- Run with uvicorn ----
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
