from .ini_config import AppSettings, IniConfig, SqlServerSettings

__all__ = [
    "AppSettings",
    "IniConfig",
    "SqlServerSettings",
]
