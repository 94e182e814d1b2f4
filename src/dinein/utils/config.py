"""Access to the ``[custom]`` section of the active domain configuration."""

from protean.utils.globals import current_domain


def custom_setting(key: str, default=None):
    """Return a custom domain setting, falling back to ``default``."""
    custom = current_domain.config.get("custom") or {}
    value = custom.get(key)
    return default if value is None else value
