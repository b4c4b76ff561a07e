# Simple in-memory key-value store with change notifications
import threading
from typing import Callable, List

_storage = {}
_subscribers: List[Callable[[str, object], None]] = []
_lock = threading.Lock()


def get(key: str, default=None):
    """Get value from in-memory storage by key"""
    with _lock:
        return _storage.get(key, default)


def set(key: str, data):
    """Store data in in-memory storage with key and notify subscribers"""
    with _lock:
        _storage[key] = data
        listeners = list(_subscribers)
    _publish(listeners, key, data)
    return True


def delete(key: str) -> bool:
    """Remove a key, returning whether it existed"""
    with _lock:
        existed = key in _storage
        _storage.pop(key, None)
        listeners = list(_subscribers)
    if existed:
        _publish(listeners, key, None)
    return existed


def clear():
    """Clear all data from storage (useful for testing)"""
    with _lock:
        _storage.clear()


def list_keys(prefix: str = ""):
    """List all keys in storage, optionally filtered by prefix"""
    with _lock:
        return [key for key in _storage if key.startswith(prefix)]


def subscribe(callback: Callable[[str, object], None]) -> Callable[[], None]:
    """Register a callback(key, value) fired after every write; returns an unsubscribe function"""
    with _lock:
        _subscribers.append(callback)

    def unsubscribe():
        with _lock:
            if callback in _subscribers:
                _subscribers.remove(callback)

    return unsubscribe


def _publish(listeners, key, data):
    for listener in listeners:
        listener(key, data)
