"""YAML 配置加载

使用示例:
    from orgdraft.config import ConfigLoader, load_yaml_config, AppSettings

    raw = ConfigLoader.load("config/orgdraft.yaml")
    settings = load_yaml_config(
        "config/orgdraft.yaml",
        AppSettings,
        draft={"strict_squad_ids": True},   # 只覆盖 draft 下的这一项
    )
"""

import copy
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Type, TypeVar, Union

import yaml

T = TypeVar("T")

PathLike = Union[str, Path]


def _absolute(config_path: PathLike, base_dir: Optional[PathLike] = None) -> Path:
    path = Path(config_path)
    if not path.is_absolute() and base_dir:
        path = Path(base_dir) / path
    return path.absolute()


def deep_merge(base: Mapping[str, Any], overrides: Mapping[str, Any]) -> Dict[str, Any]:
    """递归合并，overrides 中的值优先；两边都是字典时逐键合并

    不修改任何一个输入。
    """
    merged = copy.deepcopy(dict(base))
    for key, value in overrides.items():
        if isinstance(value, Mapping) and isinstance(merged.get(key), Mapping):
            merged[key] = deep_merge(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


class ConfigLoader:
    """按绝对路径缓存的 YAML 加载器"""

    _cache: Dict[str, Dict[str, Any]] = {}

    @classmethod
    def load(
        cls,
        config_path: PathLike,
        base_dir: Optional[PathLike] = None,
        use_cache: bool = True,
    ) -> Dict[str, Any]:
        """读取配置文件，空文件返回空字典

        Raises:
            FileNotFoundError: 文件不存在
            yaml.YAMLError: YAML 格式错误
        """
        path = _absolute(config_path, base_dir)
        key = str(path)
        if use_cache and key in cls._cache:
            return cls._cache[key]

        if not path.is_file():
            raise FileNotFoundError(f"配置文件不存在: {path}")
        config = yaml.safe_load(path.read_text(encoding="utf-8")) or {}

        if use_cache:
            cls._cache[key] = config
        return config

    @classmethod
    def reload(cls, config_path: PathLike, base_dir: Optional[PathLike] = None) -> Dict[str, Any]:
        cls._cache.pop(str(_absolute(config_path, base_dir)), None)
        return cls.load(config_path, base_dir)

    @classmethod
    def clear_cache(cls):
        cls._cache.clear()

    @classmethod
    def get_cached_paths(cls) -> List[str]:
        return list(cls._cache)


def load_yaml_config(
    config_path: PathLike,
    settings_class: Type[T],
    base_dir: Optional[PathLike] = None,
    **overrides: Any,
) -> T:
    """读取 YAML 并构造 Settings 实例

    overrides 按节深度合并到文件内容上，缓存中的原始配置保持不变。
    """
    config = deep_merge(ConfigLoader.load(config_path, base_dir), overrides)
    return settings_class(**config)
