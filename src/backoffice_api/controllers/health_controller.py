"""
Health check controller.
"""

from fastapi import APIRouter, Request

from backoffice_api.models.responses import HealthCheckResponse

router = APIRouter(prefix="/health", tags=["health"])


@router.get(
    "",
    response_model=HealthCheckResponse,
    summary="Health check",
    description="Simple health check including the poller state",
)
def health_check(request: Request):
    """Simple health check endpoint."""
    services = {"api": "healthy"}
    console = getattr(request.app.state, "console", None)
    if console is not None:
        services["poller"] = console.list_view.poller_state.value
        services["live_updates"] = console.live_updates.status.value
    return HealthCheckResponse(services=services)
