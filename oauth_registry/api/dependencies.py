from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request

from oauth_registry.repos.oauth_server_repo import OAuthServerRepo


def get_oauth_server_repo(request: Request) -> OAuthServerRepo:
    """Hand out the repository create_app() attached to this application."""
    return request.app.state.oauth_server_repo


OAuthServerRepoDep = Annotated[OAuthServerRepo, Depends(get_oauth_server_repo)]
