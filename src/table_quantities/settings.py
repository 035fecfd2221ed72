import os
import json
import logging

logger = logging.getLogger(__name__)

MODULE_ID = "table-quantities"

# --- Settings Registry ---

_REGISTRY: dict[str, dict] = {}
_VALUES: dict[str, object] = {}

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def get_world_dir() -> str:
    """Resolves the world directory (world.json, config.json, chat log, inventory db)."""
    return os.environ.get("TABLE_QUANTITIES_WORLD_DIR", os.path.join(os.getcwd(), "world"))


def _coerce(value, setting_type):
    if setting_type is bool and isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE_VALUES:
            return True
        if lowered in _FALSE_VALUES:
            return False
        raise ValueError(f"Invalid boolean setting value: {value!r}")
    return setting_type(value)


def register(key: str, *, name: str, hint: str, setting_type, default, env_var: str | None = None, scope: str = "world"):
    """Registers a setting. Re-registering a key replaces its definition and keeps any stored value."""
    _REGISTRY[key] = {
        "name": name,
        "hint": hint,
        "type": setting_type,
        "default": default,
        "env_var": env_var,
        "scope": scope,
    }


def register_settings():
    register(
        "quantityPath",
        name="TABLE_QUANTITIES.SettingQuantityPath",
        hint="TABLE_QUANTITIES.SettingQuantityPathHint",
        setting_type=str,
        default="system.quantity",
        env_var="TABLE_QUANTITIES_QUANTITY_PATH",
    )
    register(
        "modifyChat",
        name="TABLE_QUANTITIES.SettingModifyChat",
        hint="TABLE_QUANTITIES.SettingModifyChatHint",
        setting_type=bool,
        default=True,
        env_var="TABLE_QUANTITIES_MODIFY_CHAT",
    )


def get_world_config(world_dir: str | None = None) -> dict:
    """Loads the world-specific config.json."""
    config_path = os.path.join(world_dir or get_world_dir(), "config.json")
    if os.path.exists(config_path):
        try:
            with open(config_path, "r") as f:
                return json.load(f)
        except json.JSONDecodeError as e:
            logger.warning(f"{MODULE_ID} | Ignoring malformed config file {config_path}: {e}")
            return {}
    return {}


def get_setting(key: str):
    """
    Returns the value of a registered setting.
    Priority: explicitly set value > environment variable > world config.json > default.
    """
    if key not in _REGISTRY:
        raise KeyError(f"Setting not registered: {MODULE_ID}.{key}")
    if key in _VALUES:
        return _VALUES[key]

    entry = _REGISTRY[key]
    env_var = entry["env_var"]
    if env_var and os.environ.get(env_var) is not None:
        return _coerce(os.environ[env_var], entry["type"])

    config = get_world_config()
    if key in config:
        return _coerce(config[key], entry["type"])

    return entry["default"]


def set_setting(key: str, value):
    if key not in _REGISTRY:
        raise KeyError(f"Setting not registered: {MODULE_ID}.{key}")
    _VALUES[key] = _coerce(value, _REGISTRY[key]["type"])
    return _VALUES[key]


def reset_settings():
    """Drops explicitly set values so env/config/defaults apply again."""
    _VALUES.clear()


register_settings()
