from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from money_requests.routers import money_requests, approval_steps, approval_templates, fund_types
from money_requests.config import settings, parse_csv
from money_requests.exceptions import WorkflowError
import logging
import sys

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.StreamHandler(sys.stdout)
    ]
)

logger = logging.getLogger(__name__)

# Log startup information
logger.info("="*60)
logger.info("Starting Church Money Requests API")
logger.info("="*60)
logger.info(f"Override roles: {sorted(settings.override_role_set)}")
logger.info(f"Fund overdraft allowed: {settings.allow_fund_overdraft}")
logger.info(f"Default step SLA (hours): {settings.default_step_sla_hours}")
logger.info("="*60)

# Create tables (in production, use migrations)
# Base.metadata.create_all(bind=engine)

app = FastAPI(
    title="Church Money Requests API",
    description="API for departmental money requests and their approval chains",
    version="1.0.0"
)

all_origins = parse_csv(settings.cors_origins)

app.add_middleware(
    CORSMiddleware,
    allow_origins=all_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=["*"],
)

# Include routers
app.include_router(money_requests.router)
app.include_router(approval_steps.router)
app.include_router(approval_templates.router)
app.include_router(fund_types.router)


@app.get("/")
def root():
    return {"message": "Church Money Requests API", "version": "1.0.0"}


@app.get("/health")
def health_check():
    return {"status": "healthy"}


@app.exception_handler(WorkflowError)
async def workflow_exception_handler(request: Request, exc: WorkflowError):
    """Workflow errors are returned to the caller with their own status code"""
    if exc.status_code >= 500:
        logger.error(f"{exc.__class__.__name__} on {request.url.path}: {exc.message}")
    else:
        logger.info(f"{exc.__class__.__name__} on {request.url.path}: {exc.message}")

    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "error": exc.__class__.__name__}
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Log anything unexpected and answer with a 500"""
    logging.error(f"Unhandled exception: {str(exc)}", exc_info=True)

    return JSONResponse(
        status_code=500,
        content={"detail": f"Internal server error: {str(exc)}"}
    )
