import logging
import itertools

logger = logging.getLogger(__name__)

# event name -> list of (hook_id, fn, once)
_listeners: dict[str, list] = {}
_ids = itertools.count(1)


def on(name: str, fn) -> int:
    """Subscribes fn to an event. Returns an id usable with off()."""
    hook_id = next(_ids)
    _listeners.setdefault(name, []).append((hook_id, fn, False))
    return hook_id


def once(name: str, fn) -> int:
    hook_id = next(_ids)
    _listeners.setdefault(name, []).append((hook_id, fn, True))
    return hook_id


def off(name: str, fn_or_id) -> bool:
    entries = _listeners.get(name, [])
    for entry in entries:
        if entry[0] == fn_or_id or entry[1] is fn_or_id:
            entries.remove(entry)
            if not entries:
                del _listeners[name]
            return True
    return False


def _take(name: str) -> list:
    entries = list(_listeners.get(name, []))
    for entry in entries:
        if entry[2]:
            off(name, entry[0])
    return entries


def call_all(name: str, *args):
    """Calls every listener. A failing listener is logged and does not stop the others."""
    for hook_id, fn, _ in _take(name):
        try:
            fn(*args)
        except Exception:
            logger.exception(f"Error in '{name}' hook listener {hook_id}")


def call(name: str, *args) -> bool:
    """Calls listeners in order until one returns False. Returns False if any did."""
    for hook_id, fn, _ in _take(name):
        try:
            if fn(*args) is False:
                return False
        except Exception:
            logger.exception(f"Error in '{name}' hook listener {hook_id}")
    return True


def clear(name: str | None = None):
    if name is None:
        _listeners.clear()
    else:
        _listeners.pop(name, None)
