# UI Panels
"""
UI面板模块

包含：
- conversation_panel.py: 对话面板主类
- conversation/: 对话面板子模块
  - conversation_view_model.py: ViewModel 层
  - stage_views.py: 阶段结果视图
  - message_bubble.py / message_area.py: 轮次渲染
  - input_area.py / attachment_manager.py: 输入与附件
"""
