"""版本信息"""

__version__ = "0.1.0"
__author__ = "orgdraft"
__description__ = "组织架构草稿与变更跟踪引擎"
