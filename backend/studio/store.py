"""Multi-file document store with per-file undo/redo"""

import asyncio
from typing import Dict, Mapping, Optional, Union

import config
from studio import storage
from studio.history import HistoryEntry
from studio.logger import get_logger
from studio.preview import PreviewRegistry, PreviewSynthesizer, preview_registry, select_entry_file
from studio.project_io import export_file_set, import_file_set
from studio.scheduler import Debouncer
from studio.search import MatchRange, find_next, find_prev, replace_all

logger = get_logger(__name__)

SEED_FILES = {
    "index.html": (
        '<div class="flex items-center justify-center min-h-screen bg-zinc-50">\n'
        '  <div class="p-12 bg-white rounded-3xl shadow-xl border border-zinc-100 text-center">\n'
        '    <h1 class="text-4xl font-black tracking-tighter mb-4 text-black">Studio Ready</h1>\n'
        '    <p class="text-zinc-500 font-medium">Select a project to start building.</p>\n'
        "  </div>\n"
        "</div>"
    ),
    "style.css": "/* Custom Styles */\nbody {\n  background: #fafafa;\n}",
    "script.js": '// script.js\nconsole.log("Artifact Studio Loaded");',
}


class DocumentStore:
    """
    The file set of one project plus its edit history.

    Reads are always current: `edit` writes the live content immediately and
    only defers the history checkpoint, which is debounced per file. Every
    mutation rebuilds the preview and writes the file set through to storage.
    """

    def __init__(
        self,
        project_id: str,
        files: Optional[Mapping[str, str]] = None,
        registry: Optional[PreviewRegistry] = None,
        history_limit: int = config.HISTORY_LIMIT,
        checkpoint_delay: float = config.CHECKPOINT_DELAY_SECONDS,
        persist: bool = True,
        loop: Optional[asyncio.AbstractEventLoop] = None,
    ):
        self.project_id = project_id
        self.history_limit = history_limit
        self.persist = persist
        self.files: Dict[str, str] = {}
        self.histories: Dict[str, HistoryEntry] = {}
        self.active_file: Optional[str] = None
        self.preview = PreviewSynthesizer(registry or preview_registry)
        self._checkpoints = Debouncer(checkpoint_delay, loop)
        self.load_file_set(SEED_FILES if files is None else files)

    @classmethod
    def open(cls, project_id: str, **kwargs) -> "DocumentStore":
        """Create a store from the project's saved files, falling back to the seed set"""
        saved = storage.load_project_files(project_id)
        if saved is None:
            logger.info(f"No saved files for project {project_id}, using seed files")
        return cls(project_id, files=saved, **kwargs)

    # --- reads ---

    def select(self, name: str) -> str:
        return self.files.get(name, "")

    def set_active(self, name: str) -> str:
        self.active_file = name
        return self.select(name)

    def history(self, name: str) -> Optional[HistoryEntry]:
        return self.histories.get(name)

    def can_undo(self, name: str) -> bool:
        entry = self.histories.get(name)
        if entry is None:
            return False
        if self._has_uncommitted(name):
            return bool(entry.stack)
        return entry.can_undo

    def can_redo(self, name: str) -> bool:
        entry = self.histories.get(name)
        if entry is None or self._has_uncommitted(name):
            return False
        return entry.can_redo

    def _has_uncommitted(self, name: str) -> bool:
        # a pending checkpoint that will push a new snapshot when flushed
        entry = self.histories.get(name)
        return (
            self._checkpoints.is_pending(name)
            and entry is not None
            and entry.current != self.files.get(name)
        )

    @property
    def preview_handle(self) -> Optional[str]:
        return self.preview.handle

    # --- mutations ---

    def edit(self, name: str, content: str):
        """Replace a file's content now and checkpoint it once edits go quiet"""
        if content is None:
            content = ""
        if name not in self.histories:
            # seed from the pre-edit content so the first edit can be undone
            self.histories[name] = (
                HistoryEntry.seeded(self.files[name], self.history_limit)
                if name in self.files
                else HistoryEntry(limit=self.history_limit)
            )
        self.files[name] = content
        self._checkpoints.schedule(name, lambda: self._checkpoint(name, content))
        self._changed()

    def clear(self, name: str):
        self.edit(name, "")

    def undo(self, name: Optional[str] = None) -> Optional[str]:
        name = name or self.active_file
        self._checkpoints.flush(name)
        entry = self.histories.get(name)
        content = entry.undo() if entry else None
        if content is None:
            logger.debug(f"Nothing to undo for {name}")
            return None
        self.files[name] = content
        self._changed()
        return content

    def redo(self, name: Optional[str] = None) -> Optional[str]:
        name = name or self.active_file
        self._checkpoints.flush(name)
        entry = self.histories.get(name)
        content = entry.redo() if entry else None
        if content is None:
            logger.debug(f"Nothing to redo for {name}")
            return None
        self.files[name] = content
        self._changed()
        return content

    def load_file_set(self, files: Mapping[str, str]):
        """Replace every file, reset histories and pick the default active file"""
        self._checkpoints.cancel_all()
        self.files = {str(name): content or "" for name, content in files.items()}
        self.histories = {
            name: HistoryEntry.seeded(content, self.history_limit)
            for name, content in self.files.items()
        }
        self.active_file = select_entry_file(self.files, fallback_to_first=True)
        logger.info(
            f"Project {self.project_id}: loaded {len(self.files)} file(s), active={self.active_file}"
        )
        self._changed()

    def apply_artifacts(self, artifacts: Mapping[str, str], replace: bool = True):
        """Open extracted artifacts, either as the whole project or merged into it"""
        if not artifacts:
            return
        if replace:
            self.load_file_set(artifacts)
            return
        for name, content in artifacts.items():
            self.edit(name, content)

    # --- search/replace on a file ---

    def find_next(self, query: str, position: int = 0, name: Optional[str] = None) -> Optional[MatchRange]:
        return find_next(self.select(name or self.active_file), query, position)

    def find_prev(self, query: str, position: int, name: Optional[str] = None) -> Optional[MatchRange]:
        return find_prev(self.select(name or self.active_file), query, position)

    def replace_all(self, query: str, replacement: str, name: Optional[str] = None) -> str:
        name = name or self.active_file
        if not query:
            return self.select(name)
        self.edit(name, replace_all(self.select(name), query, replacement))
        return self.select(name)

    # --- import/export ---

    def export_project(self) -> str:
        return export_file_set(self.files)

    def import_project(self, document: Union[str, bytes]):
        """Load a project document; the current files are untouched if it is malformed"""
        self.load_file_set(import_file_set(document))

    # --- lifecycle ---

    def flush(self):
        """Commit every pending checkpoint immediately"""
        self._checkpoints.flush_all()

    def close(self):
        self._checkpoints.cancel_all()
        self.preview.release()

    def _checkpoint(self, name: str, content: str):
        entry = self.histories.setdefault(name, HistoryEntry(limit=self.history_limit))
        if entry.push(content):
            logger.debug(f"Checkpoint {name} ({len(entry.stack)} snapshot(s))")

    def _changed(self):
        self.preview.refresh(self.files)
        if self.persist:
            storage.save_project_files(self.project_id, self.files)
