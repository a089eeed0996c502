"""
Health Check Endpoints.

- /health: Liveness check (process running)
"""

from fastapi import APIRouter

from hello_versioning.backend.api.hello import GREETING_HANDLERS
from hello_versioning.core.config import get_app_config

router = APIRouter()


@router.get("/health")
async def health_check() -> dict[str, str]:
    """
    Liveness check.

    Returns 200 if the process is running, with the supported API versions.
    """
    return {
        "status": "healthy",
        "version": get_app_config().application.version,
        "api_versions": ",".join(sorted(GREETING_HANDLERS)),
    }
