from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, Query, Response, status
from pydantic import BaseModel

from oauth_registry.api.dependencies import OAuthServerRepoDep
from oauth_registry.models.oauth_server import OAuthServer
from oauth_registry.repos.file_oauth_server_repo import FileSystemOAuthServerRepo
from oauth_registry.repos.oauth_server_repo import (
    OAuthServerNotFoundError,
    OAuthServerRepoError,
)

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Admin surface over the OAuth server repository
#
#   GET    /oauth/servers                       — list every definition
#   GET    /oauth/servers/{name}                — fetch one definition
#   POST   /oauth/servers                       — add or replace a definition
#   DELETE /oauth/servers/{name}                — remove (idempotent)
#   POST   /oauth/servers/reload                — re-scan the definition directory
#   GET    /oauth/token-url?url=...             — resolve by upstream token URL
#
# The token-URL lookup sits outside /oauth/servers so every server name,
# whatever it is, stays reachable at /oauth/servers/{name}.
#
# Changes made here live in memory only; nothing is written back to disk.
# ---------------------------------------------------------------------------

router = APIRouter(prefix="/oauth/servers", tags=["oauth-servers"])
lookup_router = APIRouter(prefix="/oauth", tags=["oauth-servers"])


class ReloadOut(BaseModel):
    loaded: int


def _not_found(exc: OAuthServerNotFoundError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))


@router.get("", response_model=list[OAuthServer])
def list_oauth_servers(repo: OAuthServerRepoDep) -> list[OAuthServer]:
    return repo.find_all()


@lookup_router.get("/token-url", response_model=OAuthServer)
def get_oauth_server_by_token_url(
    repo: OAuthServerRepoDep,
    url: str = Query(min_length=1),
) -> OAuthServer:
    try:
        return repo.find_by_token_url(url)
    except OAuthServerNotFoundError as exc:
        raise _not_found(exc) from None


@router.get("/{name}", response_model=OAuthServer)
def get_oauth_server(name: str, repo: OAuthServerRepoDep) -> OAuthServer:
    try:
        return repo.find_by_name(name)
    except OAuthServerNotFoundError as exc:
        raise _not_found(exc) from None


@router.post("", response_model=OAuthServer, status_code=status.HTTP_201_CREATED)
def add_oauth_server(server: OAuthServer, repo: OAuthServerRepoDep) -> OAuthServer:
    replaced = server.name in repo
    repo.add(server)
    logger.info(
        "OAuth server %s name=%s",
        "replaced" if replaced else "added",
        server.name,
        extra={"server_name": server.name},
    )
    return server


@router.post("/reload", response_model=ReloadOut)
def reload_oauth_servers(repo: OAuthServerRepoDep) -> ReloadOut:
    if not isinstance(repo, FileSystemOAuthServerRepo):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="repository is not backed by a definition directory",
        )

    try:
        repo.reload()
    except OAuthServerRepoError as exc:
        logger.error("OAuth server reload failed: %s", exc)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=str(exc),
        ) from None

    return ReloadOut(loaded=len(repo))


@router.delete("/{name}", status_code=status.HTTP_204_NO_CONTENT)
def remove_oauth_server(name: str, repo: OAuthServerRepoDep) -> Response:
    repo.remove(name)
    logger.info("OAuth server removed name=%s", name, extra={"server_name": name})
    return Response(status_code=status.HTTP_204_NO_CONTENT)
