"""
Preview synthesis: turn a file set into one self-contained HTML document.

The document is handed out through a registry of revocable handles, the
server-side counterpart of a browser object URL. Each synthesizer owns at most
one live handle and releases it whenever a newer preview supersedes it.
"""

import re
import threading
import uuid
from typing import Dict, Iterable, Mapping, Optional

from studio.errors import ResourceReleaseFailure
from studio.logger import get_logger

logger = get_logger(__name__)

ENTRY_FILE = "index.html"
STYLE_EXTENSIONS = (".css",)
SCRIPT_EXTENSIONS = (".js", ".ts", ".jsx", ".tsx")

SANDBOX_FLAGS = ("allow-scripts", "allow-modals", "allow-forms", "allow-popups")

FULL_DOCUMENT = re.compile(r"<html|<body", re.IGNORECASE)
HEAD_CLOSE = re.compile(r"</head>", re.IGNORECASE)
BODY_CLOSE = re.compile(r"</body>", re.IGNORECASE)

FRAGMENT_TEMPLATE = """<!DOCTYPE html>
<html>
<head>
  <meta charset="utf-8">
  <meta name="viewport" content="width=device-width, initial-scale=1">
  <script src="https://cdn.tailwindcss.com"></script>
  <link href="https://fonts.googleapis.com/css2?family=Inter:wght@400;500;600;700;800&display=swap" rel="stylesheet">
  <style>
    body {{ font-family: 'Inter', sans-serif; margin: 0; min-height: 100vh; }}
    {css}
  </style>
</head>
<body>
  {html}
  <script>{js}</script>
</body>
</html>"""


def select_entry_file(names: Iterable[str], fallback_to_first: bool = False) -> Optional[str]:
    """Prefer index.html, then the first .html file, then optionally the first file"""
    names = list(names)
    if ENTRY_FILE in names:
        return ENTRY_FILE
    for name in names:
        if name.lower().endswith(".html"):
            return name
    if fallback_to_first and names:
        return names[0]
    return None


def build_preview(files: Mapping[str, str]) -> str:
    """Build the preview document for a file set. Output depends only on the input."""
    entry = select_entry_file(files)
    html = files.get(entry, "") if entry else ""

    css = "\n".join(
        content for name, content in files.items() if name.lower().endswith(STYLE_EXTENSIONS)
    )
    js = "\n".join(
        content for name, content in files.items() if name.lower().endswith(SCRIPT_EXTENSIONS)
    )

    if FULL_DOCUMENT.search(html):
        return _inject(html, css, js)
    return FRAGMENT_TEMPLATE.format(css=css, html=html, js=js)


def _inject(document: str, css: str, js: str) -> str:
    style_tag = f"<style>\n{css}\n</style>"
    script_tag = f"<script>\n{js}\n</script>"

    # callables keep backslashes in user code literal
    if HEAD_CLOSE.search(document):
        document = HEAD_CLOSE.sub(lambda m: f"{style_tag}\n{m.group(0)}", document, count=1)
    else:
        document = style_tag + document

    if BODY_CLOSE.search(document):
        document = BODY_CLOSE.sub(lambda m: f"{script_tag}\n{m.group(0)}", document, count=1)
    else:
        document = document + script_tag
    return document


def sandbox_policy() -> str:
    """Content-Security-Policy value isolating a served preview"""
    return "sandbox " + " ".join(SANDBOX_FLAGS)


class PreviewRegistry:
    """Thread-safe table of live preview documents keyed by opaque handle"""

    def __init__(self):
        self._documents: Dict[str, str] = {}
        self._lock = threading.Lock()

    def create(self, html: str) -> str:
        handle = uuid.uuid4().hex
        with self._lock:
            self._documents[handle] = html
        return handle

    def resolve(self, handle: str) -> Optional[str]:
        with self._lock:
            return self._documents.get(handle)

    def revoke(self, handle: str):
        with self._lock:
            if self._documents.pop(handle, None) is None:
                raise ResourceReleaseFailure(f"Preview handle {handle} is not live")

    def live_count(self) -> int:
        with self._lock:
            return len(self._documents)


class PreviewSynthesizer:
    """Owns the single live preview handle of one document store"""

    def __init__(self, registry: "PreviewRegistry"):
        self.registry = registry
        self.handle: Optional[str] = None
        self.html: Optional[str] = None

    def refresh(self, files: Mapping[str, str]) -> str:
        """Rebuild the preview, publish it under a new handle and release the old one"""
        html = build_preview(files)
        previous = self.handle
        self.handle = self.registry.create(html)
        self.html = html
        if previous is not None:
            self._release(previous)
        return self.handle

    def release(self):
        if self.handle is not None:
            self._release(self.handle)
        self.handle = None
        self.html = None

    def _release(self, handle: str):
        try:
            self.registry.revoke(handle)
        except ResourceReleaseFailure as e:
            logger.warning(f"Failed to release preview handle: {e}")


# --- global preview registry instance ---
preview_registry = PreviewRegistry()
