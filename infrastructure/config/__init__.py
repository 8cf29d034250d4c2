# Configuration
"""
配置管理模块

包含：
- settings.py: 全局常量与默认配置
- config_manager.py: 用户配置读写
"""

from .config_manager import ConfigManager

__all__ = [
    "ConfigManager",
]
