"""Project document import/export"""

import json
from typing import Dict, Mapping, Union

from studio.errors import MalformedProjectError


def export_file_set(files: Mapping[str, str]) -> str:
    """Serialize a file set as a pretty-printed JSON object, preserving file order"""
    return json.dumps(dict(files), indent=2, ensure_ascii=False)


def import_file_set(document: Union[str, bytes]) -> Dict[str, str]:
    """Parse a project document (text or raw UTF-8 bytes) into a file set"""
    if isinstance(document, bytes):
        try:
            document = document.decode("utf-8")
        except UnicodeDecodeError as e:
            raise MalformedProjectError(f"Project document is not valid UTF-8: {e}") from e

    try:
        parsed = json.loads(document)
    except (TypeError, ValueError) as e:
        raise MalformedProjectError(f"Project document is not valid JSON: {e}") from e

    if not isinstance(parsed, dict):
        raise MalformedProjectError(
            f"Project document must be a JSON object, got {type(parsed).__name__}"
        )

    return {str(name): _coerce(value) for name, value in parsed.items()}


def _coerce(value) -> str:
    if isinstance(value, str):
        return value
    if value is None:
        return ""
    return json.dumps(value, ensure_ascii=False)
