"""
core/config.py — 配置加载

• 读取 YAML 配置文件（CONFIG_FILE 环境变量，默认 ./config.yaml）
• 支持 ${VAR} / ${VAR:-default} 环境变量替换
• cfg.get("a.b.c", default) 按点号路径取值
"""

import copy
import os
import re
from typing import Any, Dict

import yaml

VERSION = "1.0.0"

_DEFAULTS: Dict[str, Any] = {
    "app_name": "Foundry StartupMatch",
    "db": "sqlite:///data/foundry.db",
    "secret": "foundry-dev-secret",
    "token_expire_minutes": 60 * 24 * 7,
    "api_base": "/api",
    "log": {"level": "INFO", "file": ""},
    "cors": {"origins": ["*"]},
    "uploads": {
        "dir": "./data/uploads",
        "url_prefix": "/uploads",
        "max_bytes": 5 * 1024 * 1024,
    },
    "qiniu": {"access_key": "", "secret_key": "", "bucket": "", "domain": ""},
    "relay": {"path": "/ws", "require_auth": False},
}

_ENV_PATTERN = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)(?::-([^}]*))?\}")


def _merge(base: dict, extra: dict) -> dict:
    for key, value in (extra or {}).items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            _merge(base[key], value)
        else:
            base[key] = value
    return base


class Config:
    def __init__(self, path: str = None):
        self.path = path or os.environ.get("CONFIG_FILE", "config.yaml")
        self.config: Dict[str, Any] = {}
        self.reload()

    def replace_env_vars(self, data: Any) -> Any:
        """递归替换配置中的环境变量引用"""
        if isinstance(data, dict):
            return {k: self.replace_env_vars(v) for k, v in data.items()}
        if isinstance(data, list):
            return [self.replace_env_vars(v) for v in data]
        if isinstance(data, str):
            return _ENV_PATTERN.sub(
                lambda m: os.environ.get(m.group(1), m.group(2) or ""), data
            )
        return data

    def reload(self) -> Dict[str, Any]:
        loaded = {}
        if self.path and os.path.exists(self.path):
            with open(self.path, "r", encoding="utf-8") as f:
                loaded = yaml.safe_load(f) or {}
        merged = _merge(copy.deepcopy(_DEFAULTS), self.replace_env_vars(loaded))
        self.config = merged
        return self.config

    def get(self, key: str, default: Any = None) -> Any:
        node: Any = self.config
        for part in str(key or "").split("."):
            if not isinstance(node, dict) or part not in node:
                return default
            node = node[part]
        return default if node is None else node

    def set(self, key: str, value: Any) -> None:
        """内存中覆盖配置项（不落盘）"""
        parts = str(key or "").split(".")
        node = self.config
        for part in parts[:-1]:
            node = node.setdefault(part, {})
        node[parts[-1]] = value


cfg = Config()

# 环境变量优先，便于容器部署
if os.environ.get("DATABASE_URL"):
    cfg.set("db", os.environ["DATABASE_URL"])

API_BASE = str(cfg.get("api_base", "/api")).rstrip("/")
