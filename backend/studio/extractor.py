"""
Artifact extraction from free-form model output.

Fenced code blocks become named files. Only closed fences are matched, so the
parser can be re-run on a growing stream buffer: a block that is still being
written stays prose until its closing fence arrives.
"""

import re
from dataclasses import dataclass
from typing import Dict, Iterator, Optional

from studio.logger import get_logger

logger = get_logger(__name__)

FENCE_PATTERN = re.compile(r"(```[\s\S]*?```)")
LANG_TOKEN = re.compile(r"^[A-Za-z0-9_+#.-]+$")

# any comment opener may precede the marker: //, #, <!--, /**, {/*
FILENAME_MARKER = re.compile(
    r"^[^\w\n]*(?:filename|file|name)\s*:\s*([A-Za-z0-9._/-]+)",
    re.IGNORECASE,
)

# "// utils.js" style first-line comments; the token must carry an extension
_NAME = r"([A-Za-z0-9_./-]+\.[A-Za-z0-9]+)"
FILENAME_COMMENTS = (
    re.compile(r"^\s*(?://|#|--)\s*" + _NAME + r"\s*$"),
    re.compile(r"^\s*<!--\s*" + _NAME + r"\s*-->\s*$"),
    re.compile(r"^\s*/\*\s*" + _NAME + r"\s*\*/\s*$"),
)

INFO_FILE_KEYS = ("file", "filename", "path")

LANGUAGE_FILENAMES = {
    "html": "index.html",
    "htm": "index.html",
    "xml": "index.xml",
    "css": "style.css",
    "scss": "style.scss",
    "js": "script.js",
    "javascript": "script.js",
    "ts": "script.ts",
    "typescript": "script.ts",
    "jsx": "App.jsx",
    "tsx": "App.tsx",
    "json": "data.json",
    "py": "main.py",
    "python": "main.py",
    "md": "README.md",
    "markdown": "README.md",
    "svg": "image.svg",
    "sql": "query.sql",
    "sh": "script.sh",
    "bash": "script.sh",
}

DEFAULT_FILENAME = "artifact.txt"

MEDIA_DIRECTIVE = re.compile(r"\[GENERATE_IMAGE:\s*(.*?)\]")


@dataclass(frozen=True)
class Segment:
    """One piece of a split response: prose, or a closed fenced block"""

    fenced: bool
    raw: str
    lang: str = ""
    content: str = ""
    info_filename: Optional[str] = None


def iter_segments(text: str) -> Iterator[Segment]:
    """Yield prose and fenced segments of text in order"""
    for index, part in enumerate(FENCE_PATTERN.split(text)):
        # re.split puts captured fences at odd positions
        if index % 2 == 0:
            if part:
                yield Segment(fenced=False, raw=part)
            continue
        lang, info_filename, body = _parse_fence(part[3:-3])
        yield Segment(
            fenced=True,
            raw=part,
            lang=lang,
            content=_trim_blank_lines(body),
            info_filename=info_filename,
        )


def extract(text: str) -> Dict[str, str]:
    """
    Parse text into an ordered {filename: content} mapping.

    Later blocks that resolve to an existing name overwrite the earlier
    content but keep the position of its first appearance.
    """
    files: Dict[str, str] = {}
    for segment in iter_segments(text or ""):
        if not segment.fenced:
            continue
        name = derive_filename(segment.content, segment.lang, segment.info_filename)
        if name in files:
            logger.debug(f"Artifact {name} appears more than once, keeping the last block")
        files[name] = segment.content
    return files


def derive_filename(
    content: str, lang: str = "", info_filename: Optional[str] = None
) -> str:
    """Resolve a file name for a block: marker, comment, fence attribute, language, fallback"""
    first_line = content.split("\n", 1)[0]

    match = FILENAME_MARKER.match(first_line)
    if match:
        return match.group(1)

    for pattern in FILENAME_COMMENTS:
        match = pattern.match(first_line)
        if match:
            return match.group(1)

    if info_filename:
        return info_filename

    lang = (lang or "").lower()
    if lang in LANGUAGE_FILENAMES:
        return LANGUAGE_FILENAMES[lang]

    logger.debug(f"No filename hint for block (lang={lang or 'none'}), using fallback")
    return f"file.{lang}" if lang else DEFAULT_FILENAME


def find_media_directive(text: str) -> Optional[str]:
    """Return the prompt of the first [GENERATE_IMAGE: ...] directive, if any"""
    match = MEDIA_DIRECTIVE.search(text or "")
    if not match:
        return None
    return match.group(1).strip() or None


def strip_media_directives(text: str) -> str:
    return MEDIA_DIRECTIVE.sub("", text or "").strip()


class ArtifactStream:
    """Accumulates streamed chunks and reports artifacts as their fences close"""

    def __init__(self):
        self._buffer = ""
        self._files: Dict[str, str] = {}

    @property
    def text(self) -> str:
        return self._buffer

    @property
    def files(self) -> Dict[str, str]:
        return dict(self._files)

    def feed(self, chunk: str) -> Dict[str, str]:
        """Append a chunk; return the artifacts that are new or changed"""
        if not chunk:
            return {}
        self._buffer += chunk
        # without a backtick no fence can have closed
        if "`" not in chunk:
            return {}

        current = extract(self._buffer)
        changed = {
            name: content
            for name, content in current.items()
            if self._files.get(name) != content
        }
        self._files = current
        if changed:
            logger.debug(f"Stream resolved artifacts: {list(changed)}")
        return changed


def _parse_fence(inner: str):
    """Split a fence body into (lang, info filename, body)"""
    if "\n" not in inner:
        return "", None, inner

    info, body = inner.split("\n", 1)
    tokens = info.split()
    if not tokens:
        return "", None, body
    if not LANG_TOKEN.match(tokens[0]) and "=" not in tokens[0]:
        # no info string, the first line is already content
        return "", None, inner

    lang = ""
    info_filename = None
    for token in tokens:
        key, sep, value = token.partition("=")
        if sep:
            if key.lower() in INFO_FILE_KEYS and value.strip("\"'"):
                info_filename = value.strip("\"'")
        elif not lang:
            lang = token.lower()
    return lang, info_filename, body


def _trim_blank_lines(body: str) -> str:
    lines = body.split("\n")
    while lines and not lines[0].strip():
        lines.pop(0)
    while lines and not lines[-1].strip():
        lines.pop()
    return "\n".join(lines).rstrip()
