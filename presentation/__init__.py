# Presentation Layer
"""
表示层 - 主窗口、对话面板、用户交互

包含：
- main_window.py: 主窗口（对话列表 + 对话面板）
- panels/: UI 面板
  - conversation_panel.py: 对话面板主类
  - conversation/: 对话面板子组件（ViewModel、阶段视图、输入区、附件）
"""
