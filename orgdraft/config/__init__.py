"""配置模块

提供配置管理功能：
- AppSettings: 应用配置，聚合 DraftSettings 与 LoggingSettings
- ConfigLoader: YAML 配置加载器

快速开始:
    from orgdraft.config import AppSettings, load_yaml_config

    settings = load_yaml_config("config/settings.yaml", AppSettings)
"""

from .settings import (
    AppSettings,
    DraftSettings,
    LoggingSettings,
)

from .loader import (
    ConfigLoader,
    load_yaml_config,
    deep_merge,
)

__all__ = [
    "AppSettings",
    "DraftSettings",
    "LoggingSettings",
    "ConfigLoader",
    "load_yaml_config",
    "deep_merge",
]
