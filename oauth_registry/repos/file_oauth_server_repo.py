"""Directory-backed OAuth server repository.

At startup the gateway points this at a directory of ``*.json`` files,
one OAuth server definition per file.  The directory is scanned once
(and again on reload); after that every query is served from memory by
the InMemoryOAuthServerRepo it extends.

FAILURE HANDLING
-----------------
  - Directory listing or file read fails → DefinitionLoadError.  The
    constructor raises, so there is no half-built repository to use.
  - A file is not valid JSON or not a valid definition → logged and
    skipped.  One bad file should not take every OAuth server down with
    it.  Pass ``strict=True`` to make this fatal instead.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from pydantic import ValidationError

from oauth_registry.core.metrics import DEFINITION_LOAD_FAILURES
from oauth_registry.models.oauth_server import OAuthServer
from oauth_registry.repos.oauth_server_repo import (
    InMemoryOAuthServerRepo,
    OAuthServerRepoError,
)

logger = logging.getLogger(__name__)

DEFINITION_MARKER = ".json"


class DefinitionLoadError(OAuthServerRepoError):
    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"could not load oauth server definitions from {path}: {reason}")
        self.path = path


class DefinitionParseError(OAuthServerRepoError):
    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"invalid oauth server definition in {path}: {reason}")
        self.path = path


def parse_definition(raw: bytes) -> OAuthServer:
    """Parse one JSON document.  Raises pydantic.ValidationError."""
    return OAuthServer.model_validate_json(raw)


def load_definitions(directory: str | os.PathLike[str], *, strict: bool = False) -> list[OAuthServer]:
    """Read and parse every definition file in ``directory`` (not recursive).

    Any entry whose name contains ".json" is treated as a definition.
    Files are read in name order so duplicate names resolve the same way
    on every start: the last file wins.
    """
    root = Path(directory)
    try:
        entries = sorted(root.iterdir())
    except OSError as exc:
        DEFINITION_LOAD_FAILURES.labels(reason="io").inc()
        logger.error("Couldn't list oauth server definition directory path=%s: %s", root, exc)
        raise DefinitionLoadError(root, str(exc)) from exc

    servers: list[OAuthServer] = []
    for path in entries:
        if DEFINITION_MARKER not in path.name:
            continue

        logger.info(
            "Loading oauth server definition path=%s", path, extra={"file": str(path)}
        )
        try:
            raw = path.read_bytes()
        except OSError as exc:
            DEFINITION_LOAD_FAILURES.labels(reason="io").inc()
            logger.error(
                "Couldn't load oauth server definition file path=%s: %s",
                path,
                exc,
                extra={"file": str(path)},
            )
            raise DefinitionLoadError(path, str(exc)) from exc

        try:
            server = parse_definition(raw)
        except ValidationError as exc:
            DEFINITION_LOAD_FAILURES.labels(reason="parse").inc()
            if strict:
                raise DefinitionParseError(path, str(exc)) from exc
            logger.warning(
                "Skipping invalid oauth server definition path=%s errors=%d",
                path,
                exc.error_count(),
                extra={"file": str(path)},
            )
            continue

        servers.append(server)

    return servers


class FileSystemOAuthServerRepo(InMemoryOAuthServerRepo):
    def __init__(self, directory: str | os.PathLike[str], *, strict: bool = False) -> None:
        self.directory = Path(directory)
        self.strict = strict
        super().__init__(load_definitions(self.directory, strict=strict))
        logger.info(
            "Loaded %d oauth server definition(s) from %s",
            len(self),
            self.directory,
        )

    def reload(self) -> None:
        """Re-scan the directory and swap in the result.

        If the scan fails the current definitions stay in place and the
        error propagates.
        """
        servers = load_definitions(self.directory, strict=self.strict)
        self._replace_all(servers)
        logger.info(
            "Reloaded %d oauth server definition(s) from %s",
            len(self),
            self.directory,
        )
