from dataclasses import dataclass
from typing import TYPE_CHECKING, Dict, List

if TYPE_CHECKING:
    from ambient.scoping.setting import MutableSetting


@dataclass
class RegisteredSetting:
    name: str
    group: str
    description: str
    setting: "MutableSetting"


_registry: Dict[str, RegisteredSetting] = {}


def register_setting(
    setting: "MutableSetting",
    group: str,
    description: str,
) -> List[RegisteredSetting]:
    """Register a named setting so it can be looked up by name.

    Parameters
    ----------
    setting: MutableSetting
        The setting to register. Its ``name`` is the registry key.
    group: str
        Group the setting belongs to.
    description: str
        Human readable description of the setting.

    Returns
    -------
    List[RegisteredSetting]
        The list of all registered settings.

    Raises
    ------
    ValueError
        If a different setting is already registered under the same name.
    """
    existing = _registry.get(setting.name)
    if existing is not None and existing.setting is not setting:
        raise ValueError(f"A different setting is already registered as {setting.name!r}")
    _registry[setting.name] = RegisteredSetting(
        name=setting.name,
        group=group,
        description=description,
        setting=setting,
    )
    return list(_registry.values())


def unregister_setting(name: str) -> None:
    """Remove a setting from the registry; unknown names are ignored."""
    _registry.pop(name, None)


def get_setting(name: str) -> "MutableSetting":
    """Return the registered setting called ``name``."""
    try:
        return _registry[name].setting
    except KeyError:
        raise KeyError(f"No setting registered as {name!r}") from None


def get_settings_registry() -> List[RegisteredSetting]:
    """Return the list of all registered settings."""
    return list(_registry.values())
