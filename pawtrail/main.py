from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from pawtrail.config import settings
from pawtrail.errors import ConfigurationError, PlanningError
from pawtrail.logging_config import configure_logging
from pawtrail.models.request import RoutePlanRequest
from pawtrail.models.response import ErrorResponse, RoutePlanResponse
from pawtrail.services.dependencies import build_dependencies
from pawtrail.services.route_service import RoutePlanner

logger = configure_logging()


def init_planner(app: FastAPI) -> None:
    """Build the production planner once; keep the failure for request time."""
    app.state.planner = None
    app.state.planner_error = None
    try:
        app.state.planner = RoutePlanner(build_dependencies())
        logger.info("Route planner initialized")
    except (ValueError, RuntimeError) as e:
        logger.error("Failed to initialize route planner: %s", e)
        app.state.planner_error = str(e)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_planner(app)
    yield


app = FastAPI(
    title="PawTrail API",
    description="Pet walk route planning API",
    version=settings.api_version,
    lifespan=lifespan,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # In production, specify exact origins
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def get_planner(request: Request) -> RoutePlanner:
    """Planner built at startup"""
    planner = getattr(request.app.state, "planner", None)
    if planner is None:
        reason = getattr(request.app.state, "planner_error", None) or "not started"
        raise ConfigurationError(f"Route planner unavailable: {reason}")
    return planner


def _error_response(status_code: int, message: str, error_type: str) -> JSONResponse:
    body = ErrorResponse(
        error=message,
        error_type=error_type,
        timestamp=datetime.now(timezone.utc).isoformat(),
    )
    return JSONResponse(status_code=status_code, content=body.model_dump(by_alias=True))


@app.exception_handler(PlanningError)
async def planning_error_handler(request: Request, exc: PlanningError):
    logger.warning("Route planning failed: %s", exc.message)
    return _error_response(exc.status_code, exc.message, type(exc).__name__)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    message = "; ".join(
        f"{'.'.join(str(part) for part in error.get('loc', ()))}: {error.get('msg', '')}"
        for error in errors
    )
    return _error_response(422, message or "Invalid request", "ValidationError")


@app.post(
    "/api/v1/routes/plan",
    response_model=RoutePlanResponse,
    responses={
        404: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
        503: {"model": ErrorResponse},
    },
)
async def plan_routes(
    plan_request: RoutePlanRequest, planner: RoutePlanner = Depends(get_planner)
):
    """Plan up to three ranked walking routes for the given pets"""
    return await planner.plan(plan_request)


@app.get("/health")
async def health_check():
    """Health check"""
    return {"status": "healthy", "version": settings.api_version}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
