"""
Session registry for open map views.
Keeps one MapSession per session id, in memory only.
"""

import logging
from typing import Callable, Dict

from pinna.core.errors import SessionNotFound
from pinna.core.logger import logs
from pinna.models.places_model import Position
from pinna.repos.catalog_repo import CatalogRepository
from pinna.services.Map_service import MapSession
from pinna.services.Position_service import PushLocationProvider


class SessionRegistry:
    """
    Opens, looks up and tears down map sessions.
    Each session gets its own push-fed location provider.
    """

    def __init__(self, repo_factory: Callable[[], CatalogRepository] = CatalogRepository):
        self.repo_factory = repo_factory
        self._sessions: Dict[str, MapSession] = {}
        self._providers: Dict[str, PushLocationProvider] = {}

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._sessions

    async def open(self, session_id: str, location_permission: bool = True) -> MapSession:
        """Opens a session, replacing (and closing) any previous one with the same id"""
        if session_id in self._sessions:
            await self.close(session_id)

        provider = PushLocationProvider(permission_granted=location_permission)
        session = MapSession.create(provider, self.repo_factory())
        self._sessions[session_id] = session
        self._providers[session_id] = provider

        await session.open()
        logs.log(logging.INFO, f"Map session opened: {session_id}", extra={"location": location_permission})
        return session

    def get(self, session_id: str) -> MapSession:
        session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFound(session_id)
        return session

    def push_position(self, session_id: str, position: Position) -> MapSession:
        session = self.get(session_id)
        self._providers[session_id].push(position)
        return session

    async def close(self, session_id: str) -> None:
        session = self._sessions.pop(session_id, None)
        self._providers.pop(session_id, None)
        if session is None:
            raise SessionNotFound(session_id)
        await session.close()

    async def close_all(self) -> None:
        for session_id in list(self._sessions):
            await self.close(session_id)


session_registry = SessionRegistry()

# Dependency for FastAPI
def get_registry() -> SessionRegistry:
    return session_registry
