# Domain Layer
"""
领域层 - 核心业务模型

包含：
- conversation/: 对话域（消息内容、轮次、阶段状态机、对话存储）
"""
