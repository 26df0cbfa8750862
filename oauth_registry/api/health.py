"""Health and readiness endpoints.

/health is the liveness probe: if the process answers, it is alive.  It
also reports how many OAuth server definitions are loaded, which is the
quickest way to spot a gateway that started against an empty directory.

/ready is the readiness probe.  Definitions are loaded before the app
accepts traffic (create_app raises otherwise), so a responding process
is ready.
"""

from __future__ import annotations

from fastapi import APIRouter, Response

from oauth_registry.api.dependencies import OAuthServerRepoDep

router = APIRouter(tags=["health"])


@router.get("/health")
def health(repo: OAuthServerRepoDep) -> dict:
    return {"status": "ok", "oauth_servers": len(repo)}


@router.get("/ready")
def ready() -> Response:
    return Response(status_code=200)
