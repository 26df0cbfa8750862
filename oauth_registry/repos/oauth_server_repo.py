"""In-memory OAuth server repository.

CONCURRENCY MODEL: COPY-ON-WRITE SNAPSHOT
-------------------------------------------
The gateway reads this repository on many threads and writes to it
rarely (startup, admin calls, reloads).  Instead of locking every read,
the current state is an immutable snapshot:

  - Readers grab ``self._servers`` once and work on that object.  It is a
    read-only MappingProxyType over a dict nobody mutates again, so a
    reader can never see a half-applied write.
  - Writers serialize on ``self._lock``, copy the snapshot, change the
    copy and publish it with a single attribute assignment.

Writes cost O(n) for the copy.  n is the number of OAuth servers the
gateway knows about (tens), so that is fine.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable, Mapping
from types import MappingProxyType
from typing import Protocol

import httpx

from oauth_registry.core.metrics import OAUTH_SERVER_LOOKUPS, OAUTH_SERVERS_LOADED
from oauth_registry.models.oauth_server import OAuthServer

logger = logging.getLogger(__name__)


class OAuthServerRepoError(Exception):
    """Base class for repository errors."""


class OAuthServerNotFoundError(OAuthServerRepoError, LookupError):
    def __init__(self, key: str) -> None:
        super().__init__(f"oauth server not found: {key}")
        self.key = key


class OAuthServerRepo(Protocol):
    def __len__(self) -> int: ...
    def __contains__(self, name: object) -> bool: ...
    def find_all(self) -> list[OAuthServer]: ...
    def find_by_name(self, name: str) -> OAuthServer: ...
    def find_by_token_url(self, url: str | httpx.URL) -> OAuthServer: ...
    def add(self, server: OAuthServer) -> None: ...
    def remove(self, name: str) -> None: ...


class InMemoryOAuthServerRepo:
    def __init__(self, servers: Iterable[OAuthServer] = ()) -> None:
        self._lock = threading.Lock()
        self._servers: Mapping[str, OAuthServer] = MappingProxyType({})
        for server in servers:
            self.add(server)
        OAUTH_SERVERS_LOADED.set(len(self._servers))

    def __len__(self) -> int:
        return len(self._servers)

    def __contains__(self, name: object) -> bool:
        return name in self._servers

    def find_all(self) -> list[OAuthServer]:
        return list(self._servers.values())

    def find_by_name(self, name: str) -> OAuthServer:
        server = self._servers.get(name)
        if server is None:
            OAUTH_SERVER_LOOKUPS.labels(lookup="name", result="miss").inc()
            raise OAuthServerNotFoundError(name)

        OAUTH_SERVER_LOOKUPS.labels(lookup="name", result="hit").inc()
        return server

    def find_by_token_url(self, url: str | httpx.URL) -> OAuthServer:
        """Return the first server whose token endpoint proxies to ``url``.

        Comparison is on the string form of the URL, exactly as written in
        the definition file.  If several definitions share the same token
        URL, which one wins depends on insertion order.
        """
        target = str(url)
        for server in self._servers.values():
            if server.token_upstream_url == target:
                OAUTH_SERVER_LOOKUPS.labels(lookup="token_url", result="hit").inc()
                return server

        OAUTH_SERVER_LOOKUPS.labels(lookup="token_url", result="miss").inc()
        raise OAuthServerNotFoundError(target)

    def add(self, server: OAuthServer) -> None:
        with self._lock:
            updated = dict(self._servers)
            if server.name in updated:
                logger.debug("Replacing oauth server definition name=%s", server.name)
            updated[server.name] = server
            self._publish(updated)

    def remove(self, name: str) -> None:
        with self._lock:
            if name not in self._servers:
                return
            updated = dict(self._servers)
            del updated[name]
            self._publish(updated)

    def _replace_all(self, servers: Iterable[OAuthServer]) -> None:
        """Swap the whole contents in one step (used by reloads)."""
        fresh: dict[str, OAuthServer] = {}
        for server in servers:
            fresh[server.name] = server
        with self._lock:
            self._publish(fresh)

    def _publish(self, servers: dict[str, OAuthServer]) -> None:
        # Caller holds self._lock.
        self._servers = MappingProxyType(servers)
        OAUTH_SERVERS_LOADED.set(len(servers))
