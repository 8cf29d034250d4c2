# Infrastructure Layer
"""
基础设施层 - 配置管理、后端访问、工具函数

包含：
- config/: 配置管理（settings、config_manager）
- council_api/: 议会后端客户端（httpx）
- utils/: 工具函数（logger、markdown_renderer、data_url）
"""
