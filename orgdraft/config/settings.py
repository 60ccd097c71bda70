"""
配置模块
提供草稿引擎的默认配置，业务项目可以继承并覆盖
"""

from pydantic_settings import BaseSettings
from pydantic import Field


class DraftSettings(BaseSettings):
    """草稿配置

    使用示例:
        from orgdraft.config import DraftSettings

        draft_config = DraftSettings(
            draft_name_max_length=100,
            strict_squad_ids=True,   # 未知小组 ID 直接报错
        )

    环境变量:
        ORGDRAFT_DRAFT_DRAFT_NAME_MAX_LENGTH=255
        ORGDRAFT_DRAFT_STRICT_SQUAD_IDS=true
    """
    draft_name_max_length: int = Field(default=255, ge=1, description="草稿名称最大长度")
    department_max_length: int = Field(default=100, ge=1, description="部门名称最大长度")
    strict_squad_ids: bool = Field(
        default=False,
        description="预览时遇到小组目录中不存在的小组 ID 是否报错（默认丢弃）"
    )

    class Config:
        env_prefix = "ORGDRAFT_DRAFT_"


class LoggingSettings(BaseSettings):
    """日志配置

    使用示例:
        from orgdraft.config import LoggingSettings

        log_config = LoggingSettings(level="DEBUG", file_path="logs/orgdraft.log")
    """
    level: str = Field(default="INFO", description="日志级别")
    file_path: str = Field(default="", description="日志文件路径，为空表示不写文件")
    enable_console: bool = Field(default=True, description="是否启用控制台输出")

    class Config:
        env_prefix = "ORGDRAFT_LOG_"


class AppSettings(BaseSettings):
    """应用基础配置

    将各子配置类聚合为嵌套结构。

    配置优先级（从高到低）:
        显式覆盖参数 > YAML 配置文件 > 环境变量 > 代码中的默认值

    内置子配置及环境变量前缀:
        - draft:   DraftSettings   (ORGDRAFT_DRAFT_)
        - logging: LoggingSettings (ORGDRAFT_LOG_)

    使用示例:
        from orgdraft.config import AppSettings, load_yaml_config

        settings = load_yaml_config("config/settings.yaml", AppSettings)

    YAML 配置示例 (config/settings.yaml):
        draft:
          draft_name_max_length: 120
          strict_squad_ids: false
        logging:
          level: "INFO"
          file_path: "logs/orgdraft.log"
    """
    draft: DraftSettings = Field(default_factory=DraftSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    class Config:
        env_prefix = "ORGDRAFT_"
