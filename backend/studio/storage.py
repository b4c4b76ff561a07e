"""Persistence helpers on top of the key-value store"""

from datetime import datetime
from typing import Dict, List, Optional

from studio import db
from studio.errors import MalformedProjectError
from studio.logger import get_logger
from studio.models import Bot, ChatMessage
from studio.project_io import export_file_set, import_file_set

logger = get_logger(__name__)

FILES_KEY_PREFIX = "preview_files_"
LAST_ACTIVE_KEY = "last_active_bot_id"
BOT_KEY_PREFIX = "bot:"


def files_key(project_id: str) -> str:
    return f"{FILES_KEY_PREFIX}{project_id}"


def load_project_files(project_id: str) -> Optional[Dict[str, str]]:
    """Load a project's saved file set, or None if nothing usable is stored"""
    saved = db.get(files_key(project_id))
    if saved is None:
        return None
    try:
        return import_file_set(saved)
    except MalformedProjectError as e:
        logger.error(f"Failed to parse saved files for project {project_id}: {e}")
        return None


def save_project_files(project_id: str, files: Dict[str, str]) -> bool:
    return db.set(files_key(project_id), export_file_set(files))


def project_exists(project_id: str) -> bool:
    """A project exists once it has saved files or a bot profile"""
    return db.get(files_key(project_id)) is not None or get_bot(project_id) is not None


def get_last_active_project() -> Optional[str]:
    return db.get(LAST_ACTIVE_KEY)


def set_last_active_project(project_id: str) -> bool:
    return db.set(LAST_ACTIVE_KEY, project_id)


def save_bot(bot: Bot) -> bool:
    return db.set(f"{BOT_KEY_PREFIX}{bot.id}", bot.model_dump(mode="json"))


def get_bot(bot_id: str) -> Optional[Bot]:
    data = db.get(f"{BOT_KEY_PREFIX}{bot_id}")
    if not data:
        return None
    return Bot(**data)


def list_bots() -> List[Bot]:
    bots = []
    for key in db.list_keys(BOT_KEY_PREFIX):
        data = db.get(key)
        if data:
            bots.append(Bot(**data))
    return bots


def delete_bot(bot_id: str) -> bool:
    existed = db.delete(f"{BOT_KEY_PREFIX}{bot_id}")
    db.delete(files_key(bot_id))
    db.delete(chat_history_key(bot_id))
    return existed


def touch_bot(bot_id: str) -> Optional[Bot]:
    """Bump usage stats after a chat turn"""
    bot = get_bot(bot_id)
    if not bot:
        return None
    bot.usage_count += 1
    bot.last_active = datetime.now().isoformat()
    save_bot(bot)
    return bot


def chat_history_key(bot_id: str) -> str:
    return f"chat_history_{bot_id}"


def load_chat_history(bot_id: str) -> List[ChatMessage]:
    return [ChatMessage(**item) for item in db.get(chat_history_key(bot_id), [])]


def append_chat_messages(bot_id: str, *messages: ChatMessage) -> bool:
    history = db.get(chat_history_key(bot_id), [])
    history = history + [message.model_dump() for message in messages]
    return db.set(chat_history_key(bot_id), history)
