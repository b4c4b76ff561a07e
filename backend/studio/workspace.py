"""Project context registry: one document store per project, one active at a time"""

from typing import Dict, Optional

from studio import storage
from studio.logger import get_logger
from studio.store import DocumentStore

logger = get_logger(__name__)


class Workspace:
    """Opens stores on demand and tears down the previous context on switch"""

    def __init__(self, **store_options):
        self.stores: Dict[str, DocumentStore] = {}
        self.active_id: Optional[str] = None
        self._store_options = store_options

    def get(self, project_id: str) -> DocumentStore:
        store = self.stores.get(project_id)
        if store is None:
            store = DocumentStore.open(project_id, **self._store_options)
            self.stores[project_id] = store
        return store

    def find(self, project_id: str) -> Optional[DocumentStore]:
        """Return an open or saved project without creating a new one"""
        store = self.stores.get(project_id)
        if store is not None:
            return store
        if not storage.project_exists(project_id):
            return None
        return self.get(project_id)

    @property
    def active(self) -> Optional[DocumentStore]:
        if self.active_id is None:
            return None
        return self.stores.get(self.active_id)

    def switch(self, project_id: str) -> DocumentStore:
        """Make a project active, cancelling the previous project's pending checkpoints"""
        previous = self.active
        if previous is not None and previous.project_id != project_id:
            previous.close()
            del self.stores[previous.project_id]
            logger.info(f"Closed project {previous.project_id}")

        storage.set_last_active_project(project_id)
        self.active_id = project_id
        store = self.get(project_id)
        logger.info(f"Switched to project {project_id}")
        return store

    def resume(self, default: Optional[str] = None) -> Optional[DocumentStore]:
        """Reopen the last active project, if one was recorded"""
        project_id = storage.get_last_active_project() or default
        if not project_id:
            return None
        return self.switch(project_id)

    def discard(self, project_id: str):
        store = self.stores.pop(project_id, None)
        if store is not None:
            store.close()
        if self.active_id == project_id:
            self.active_id = None

    def close(self):
        for store in self.stores.values():
            store.close()
        self.stores.clear()
        self.active_id = None


# --- global workspace instance ---
workspace = Workspace()
