from __future__ import annotations

import json
import sys
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest
from fastapi.testclient import TestClient

# Ensure repo root is on sys.path so `import oauth_registry` works under pytest.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from oauth_registry.main import create_app  # noqa: E402
from oauth_registry.models.oauth_server import OAuthServer  # noqa: E402
from oauth_registry.repos.oauth_server_repo import InMemoryOAuthServerRepo  # noqa: E402

ServerFactory = Callable[..., OAuthServer]
DefinitionWriter = Callable[..., Path]


def definition_doc(
    name: str,
    token_url: str | None = None,
    **extra: Any,
) -> dict[str, Any]:
    """Build a definition document the way it appears on disk."""
    token_url = token_url or f"http://{name}.example.com/oauth/token"
    return {
        "name": name,
        "endpoints": {
            "token": {
                "listen_path": f"/{name}/token",
                "upstream_url": token_url,
                "methods": ["POST"],
            },
        },
        **extra,
    }


@pytest.fixture
def make_server() -> ServerFactory:
    def _make(name: str, token_url: str | None = None, **extra: Any) -> OAuthServer:
        return OAuthServer.model_validate(definition_doc(name, token_url, **extra))

    return _make


@pytest.fixture
def definitions_dir(tmp_path: Path) -> Path:
    d = tmp_path / "oauth"
    d.mkdir()
    return d


@pytest.fixture
def write_definition(definitions_dir: Path) -> DefinitionWriter:
    """Write a definition file; pass ``raw`` to write arbitrary content."""

    def _write(
        filename: str,
        name: str | None = None,
        *,
        token_url: str | None = None,
        raw: str | None = None,
    ) -> Path:
        path = definitions_dir / filename
        if raw is None:
            raw = json.dumps(definition_doc(name or path.stem, token_url))
        path.write_text(raw, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def repo() -> InMemoryOAuthServerRepo:
    return InMemoryOAuthServerRepo()


@pytest.fixture
def client(repo: InMemoryOAuthServerRepo) -> TestClient:
    return TestClient(create_app(repo=repo))
