"""WebSocket connection manager for project event streams"""

import asyncio
from typing import Dict, Set
from fastapi import WebSocket
from studio.logger import get_logger

logger = get_logger(__name__)


class WebSocketManager:
    """Fans out chat and preview events to every socket watching a project"""

    def __init__(self):
        self.connections: Dict[str, Set[WebSocket]] = {}
        self.locks: Dict[str, asyncio.Lock] = {}

    async def connect(self, project_id: str, websocket: WebSocket):
        """Connect a WebSocket for a project"""
        await websocket.accept()
        self.connections.setdefault(project_id, set()).add(websocket)
        self.locks.setdefault(project_id, asyncio.Lock())
        logger.info(f"WebSocket connected for project: {project_id}")

    async def disconnect(self, project_id: str, websocket: WebSocket):
        """Disconnect one WebSocket from a project"""
        sockets = self.connections.get(project_id)
        if sockets is not None:
            sockets.discard(websocket)
            if not sockets:
                del self.connections[project_id]
                self.locks.pop(project_id, None)
        logger.info(f"WebSocket disconnected for project: {project_id}")

    async def broadcast(self, project_id: str, message: dict) -> int:
        """Send message to every socket of a project, returning how many received it"""
        sockets = list(self.connections.get(project_id, ()))
        if not sockets:
            logger.debug(f"No WebSocket connection for project: {project_id}")
            return 0

        delivered = 0
        async with self.locks[project_id]:
            for websocket in sockets:
                try:
                    await websocket.send_json(message)
                    delivered += 1
                except Exception as e:
                    logger.error(f"Failed to send WebSocket message to {project_id}: {e}")
                    await self.disconnect(project_id, websocket)
        return delivered

    def is_connected(self, project_id: str) -> bool:
        """Check if project has an active WebSocket connection"""
        return bool(self.connections.get(project_id))


# --- global websocket manager instance ---
ws_manager = WebSocketManager()
