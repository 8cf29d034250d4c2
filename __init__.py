# LLM Council - Main Package
"""
LLM Council 桌面客户端 - 多模型“议会”问答

Architecture:
- presentation/    表示层 (主窗口、对话面板、阶段视图)
- application/     应用层 (启动引导、议会会话服务)
- domain/          领域层 (消息内容、轮次、阶段状态机、对话存储)
- infrastructure/  基础设施层 (配置、后端客户端、日志、Markdown)
- shared/          共享内核层 (ServiceLocator、EventBus、ErrorHandler)
- resources/       资源 (主题、样式表、多语言文本)
"""

__version__ = "0.1.0"
__author__ = "LLM Council Team"
