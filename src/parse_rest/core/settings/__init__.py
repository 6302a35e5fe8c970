from parse_rest.core.settings.settings import ConfigManager, ParseSettings

__all__ = ["ParseSettings", "ConfigManager"]
