# LLM Council - Application Bootstrap
"""
应用启动引导器，负责整个应用的初始化编排

职责：
- 集中管理所有初始化逻辑
- 协调各组件的启动顺序
- 处理初始化失败和降级策略

初始化顺序（严格按此顺序执行）：
- Phase 0: 基础设施初始化（同步，阻塞式）
  - 0.0 全局配置目录初始化
  - 0.1 Logger 初始化
  - 0.2 ServiceLocator 初始化
  - 0.3 EventBus 初始化
- Phase 1: 核心管理器初始化（同步，阻塞式）
  - 1.1 ConfigManager 初始化
  - 1.2 ErrorHandler 初始化
  - 1.3 I18nManager 初始化
- Phase 2: GUI 框架初始化（同步，阻塞式）
  - 2.1 创建 QApplication 实例与 qasync 融合事件循环
  - 2.2 创建 MainWindow 实例
  - 2.3 显示主窗口
  - 2.4 调度延迟初始化
- Phase 3: 延迟初始化（在事件循环中执行）
  - 3.1 CouncilClient 初始化
  - 3.2 CouncilSession 初始化
  - 3.3 加载对话列表
  - 3.4 发布 EVENT_INIT_COMPLETE 事件
- 应用关闭时：
  - 关闭 CouncilSession（取消未完成的发送，关闭 httpx 客户端）
  - 取消剩余异步任务并关闭事件循环
"""

import asyncio
import sys
import time
import traceback
from pathlib import Path
from typing import Optional


# ============================================================
# 模块级变量（用于跨函数访问）
# ============================================================
_logger = None  # 日志器实例，Phase 0.1 后可用
_main_window = None  # 主窗口实例，Phase 2.2 后可用


def _init_phase_0() -> bool:
    """
    Phase 0: 基础设施初始化（同步，阻塞式）

    0.0 全局配置目录初始化
    0.1 Logger 初始化（最先，其他模块都需要日志）
    0.2 ServiceLocator 初始化（清空容器）
    0.3 EventBus 初始化（创建事件总线并注册）

    Returns:
        bool: 初始化是否成功
    """
    global _logger

    try:
        # --------------------------------------------------------
        # 0.0 全局配置目录初始化
        # --------------------------------------------------------
        from infrastructure.config.settings import GLOBAL_CONFIG_DIR, GLOBAL_LOG_DIR
        GLOBAL_CONFIG_DIR.mkdir(parents=True, exist_ok=True)
        GLOBAL_LOG_DIR.mkdir(parents=True, exist_ok=True)
        print("[Phase 0.0] 全局配置目录初始化完成")

        # --------------------------------------------------------
        # 0.1 Logger 初始化
        # --------------------------------------------------------
        from infrastructure.utils.logger import setup_logger, get_logger
        setup_logger()
        _logger = get_logger("bootstrap")
        _logger.info("Phase 0.1 Logger 初始化完成")

        # --------------------------------------------------------
        # 0.2 ServiceLocator 初始化
        # --------------------------------------------------------
        from shared.service_locator import ServiceLocator
        ServiceLocator.clear()
        _logger.info("Phase 0.2 ServiceLocator 初始化完成")

        # --------------------------------------------------------
        # 0.3 EventBus 初始化
        # --------------------------------------------------------
        from shared.event_bus import EventBus
        from shared.service_names import SVC_EVENT_BUS
        ServiceLocator.register(SVC_EVENT_BUS, EventBus())
        _logger.info("Phase 0.3 EventBus 初始化完成")

        return True

    except Exception as e:
        # Logger 失败时回退到 print() 输出
        print(f"[Phase 0] 初始化失败: {e}")
        traceback.print_exc()
        return False


def _init_phase_1() -> bool:
    """
    Phase 1: 核心管理器初始化（同步，阻塞式）

    1.1 ConfigManager 初始化（依赖 Logger）
    1.2 ErrorHandler 初始化（依赖 Logger、EventBus）
    1.3 I18nManager 初始化（依赖 ConfigManager）

    Returns:
        bool: 初始化是否成功
    """
    try:
        from shared.service_locator import ServiceLocator
        from shared.service_names import (
            SVC_CONFIG_MANAGER,
            SVC_ERROR_HANDLER,
            SVC_I18N_MANAGER,
        )

        # --------------------------------------------------------
        # 1.1 ConfigManager 初始化
        # 职责：加载配置，缺失字段使用默认值，校验失败时记录日志
        # --------------------------------------------------------
        from infrastructure.config.config_manager import ConfigManager
        config_manager = ConfigManager()
        config_manager.load_config()
        is_valid, errors = config_manager.validate_config()
        if not is_valid:
            for error in errors:
                _logger.warning(f"Config validation: {error}")

        from infrastructure.config.settings import CONFIG_LOG_LEVEL
        from infrastructure.utils.logger import set_console_level
        set_console_level(config_manager.get(CONFIG_LOG_LEVEL))
        ServiceLocator.register(SVC_CONFIG_MANAGER, config_manager)
        _logger.info(
            f"Phase 1.1 ConfigManager 初始化完成，后端地址: {config_manager.get_api_base_url()}"
        )

        # --------------------------------------------------------
        # 1.2 ErrorHandler 初始化
        # --------------------------------------------------------
        from shared.error_handler import ErrorHandler
        ServiceLocator.register(SVC_ERROR_HANDLER, ErrorHandler())
        _logger.info("Phase 1.2 ErrorHandler 初始化完成")

        # --------------------------------------------------------
        # 1.3 I18nManager 初始化
        # --------------------------------------------------------
        from shared.i18n_manager import I18nManager
        i18n_manager = I18nManager()
        ServiceLocator.register(SVC_I18N_MANAGER, i18n_manager)
        _logger.info(
            f"Phase 1.3 I18nManager 初始化完成，当前语言: {i18n_manager.get_current_language()}"
        )

        return True

    except Exception as e:
        if _logger:
            _logger.error(f"Phase 1 初始化失败: {e}")
        else:
            print(f"[Phase 1] 初始化失败: {e}")
        traceback.print_exc()
        return False


def _init_phase_2(app) -> Optional['QMainWindow']:
    """
    Phase 2: GUI 框架初始化（同步，阻塞式）

    2.2 创建 MainWindow 实例
    2.3 显示主窗口
    2.4 调度延迟初始化

    Returns:
        MainWindow: 主窗口实例，失败返回 None
    """
    global _main_window

    try:
        from presentation.main_window import MainWindow
        main_window = MainWindow()
        _logger.info("Phase 2.2 MainWindow 创建完成")

        main_window.show()
        _logger.info("Phase 2.3 MainWindow 显示")

        from PyQt6.QtCore import QTimer
        QTimer.singleShot(0, _delayed_init)
        _logger.info("Phase 2.4 延迟初始化已调度")

        _main_window = main_window
        return main_window

    except Exception as e:
        _logger.critical(f"Phase 2 初始化失败: {e}")
        traceback.print_exc()
        _show_fatal_error(f"Main window initialization failed: {e}")
        return None


def _delayed_init():
    """
    Phase 3: 延迟初始化（在事件循环中执行）

    3.1 CouncilClient 初始化（依赖 ConfigManager）
    3.2 CouncilSession 初始化（依赖 CouncilClient、EventBus）
    3.3 加载对话列表（后台任务）
    3.4 发布 EVENT_INIT_COMPLETE 事件

    后端不可达时不致命，界面以空列表运行，错误通过 ErrorHandler 提示
    """
    try:
        from shared.service_locator import ServiceLocator
        from shared.service_names import (
            SVC_CONFIG_MANAGER,
            SVC_COUNCIL_CLIENT,
            SVC_COUNCIL_SESSION,
            SVC_EVENT_BUS,
        )
        from shared.event_types import EVENT_INIT_COMPLETE

        # --------------------------------------------------------
        # 3.1 CouncilClient 初始化
        # --------------------------------------------------------
        from infrastructure.council_api import create_council_client
        client = create_council_client(ServiceLocator.get_optional(SVC_CONFIG_MANAGER))
        ServiceLocator.register(SVC_COUNCIL_CLIENT, client)
        _logger.info(f"Phase 3.1 CouncilClient 初始化完成: {client.base_url}")

        # --------------------------------------------------------
        # 3.2 CouncilSession 初始化
        # --------------------------------------------------------
        from application.council_session import CouncilSession
        session = CouncilSession(client)
        ServiceLocator.register(SVC_COUNCIL_SESSION, session)
        if _main_window is not None:
            _main_window.attach_session(session)
        _logger.info("Phase 3.2 CouncilSession 初始化完成")

        # --------------------------------------------------------
        # 3.3 加载对话列表
        # --------------------------------------------------------
        asyncio.ensure_future(_load_conversations(session))
        _logger.info("Phase 3.3 对话列表加载已调度")

        # --------------------------------------------------------
        # 3.4 发布 EVENT_INIT_COMPLETE 事件
        # --------------------------------------------------------
        event_bus = ServiceLocator.get(SVC_EVENT_BUS)
        event_bus.publish(EVENT_INIT_COMPLETE, {"timestamp": time.time()})
        _logger.info("所有初始化阶段完成，应用已就绪")

    except Exception as e:
        _logger.error(f"Phase 3 延迟初始化失败: {e}")
        traceback.print_exc()
        print("[WARNING] 部分功能可能不可用，应用将以降级模式运行")


async def _load_conversations(session) -> None:
    try:
        summaries = await session.refresh_conversations()
        _logger.info(f"Phase 3.3 已加载 {len(summaries)} 个对话")
    except Exception as e:
        from shared.service_locator import ServiceLocator
        from shared.service_names import SVC_ERROR_HANDLER
        error_handler = ServiceLocator.get_optional(SVC_ERROR_HANDLER)
        if error_handler is not None:
            error_handler.handle_error(e, context={"operation": "list_conversations"})
        else:
            _logger.error(f"Failed to load conversations: {e}")


def _show_fatal_error(message: str):
    from PyQt6.QtWidgets import QMessageBox, QApplication
    if QApplication.instance() is None:
        print(f"[FATAL] {message}")
        return
    QMessageBox.critical(None, "Startup Error", message)


def _install_qt_message_filter():
    """
    安装 Qt 消息过滤器

    过滤无害的 Qt 内部警告，其余消息转发到日志
    """
    from PyQt6.QtCore import qInstallMessageHandler, QtMsgType

    _filtered_warnings = [
        "QFont::setPointSize: Point size <= 0",
    ]

    def qt_message_handler(msg_type: QtMsgType, context, message: str):
        for pattern in _filtered_warnings:
            if pattern in message:
                return

        if _logger is None:
            print(f"[Qt] {message}")
        elif msg_type in (QtMsgType.QtCriticalMsg, QtMsgType.QtFatalMsg):
            _logger.error(f"[Qt] {message}")
        elif msg_type == QtMsgType.QtWarningMsg:
            _logger.warning(f"[Qt] {message}")
        else:
            _logger.debug(f"[Qt] {message}")

    qInstallMessageHandler(qt_message_handler)


def _setup_exception_hook():
    """
    绑定全局异常钩子

    未捕获异常写入日志并弹窗提示，防止程序静默崩溃
    """
    def exception_hook(exc_type, exc_value, exc_tb):
        error_msg = ''.join(traceback.format_exception(exc_type, exc_value, exc_tb))

        if _logger:
            _logger.critical(f"Uncaught exception:\n{error_msg}")
        else:
            print(f"[UNCAUGHT EXCEPTION]\n{error_msg}")

        from PyQt6.QtWidgets import QApplication
        if QApplication.instance() is not None:
            _show_fatal_error(
                f"An unhandled error occurred:\n{exc_value}\n\nDetails were written to the log file."
            )

        sys.__excepthook__(exc_type, exc_value, exc_tb)

    sys.excepthook = exception_hook


async def _close_session():
    """关闭会话：取消未完成的发送并关闭 httpx 客户端"""
    from shared.service_locator import ServiceLocator
    from shared.service_names import SVC_COUNCIL_SESSION

    session = ServiceLocator.get_optional(SVC_COUNCIL_SESSION)
    if session is None:
        return

    await session.close()
    _logger.info("CouncilSession 已关闭")


def run() -> int:
    """
    应用程序主启动函数

    执行完整的初始化流程并启动融合事件循环

    Returns:
        int: 退出码，0 表示正常退出
    """
    print("=" * 50)
    print("LLM Council 启动中...")
    print(f"Python 版本: {sys.version}")
    print(f"工作目录: {Path.cwd()}")
    print("=" * 50)

    start_time = time.time()
    _setup_exception_hook()

    print("\n[Phase 0] 基础设施初始化...")
    if not _init_phase_0():
        print("[Phase 0] 失败，无法启动")
        return 1

    print("\n[Phase 1] 核心管理器初始化...")
    if not _init_phase_1():
        print("[Phase 1] 失败，尝试继续启动（功能可能受限）...")

    elapsed = (time.time() - start_time) * 1000
    if elapsed > 500:
        _logger.warning(f"Phase 0-1 耗时 {elapsed:.0f}ms，超过 500ms 阈值")

    # ============================================================
    # Phase 2: GUI 框架初始化
    # ============================================================
    print("\n[Phase 2] GUI 框架初始化...")
    _install_qt_message_filter()

    from PyQt6.QtWidgets import QApplication
    from infrastructure.config.settings import APP_NAME, APP_ORGANIZATION, APP_VERSION
    app = QApplication(sys.argv)
    app.setApplicationName(APP_NAME)
    app.setApplicationVersion(APP_VERSION)
    app.setOrganizationName(APP_ORGANIZATION)

    # 2.1 qasync 融合事件循环
    from shared.async_runtime import init_async_runtime, run_until_quit
    init_async_runtime(app)
    _logger.info("Phase 2.1 qasync 事件循环初始化完成")

    from resources.resource_loader import load_stylesheet
    load_stylesheet(app)

    main_window = _init_phase_2(app)
    if main_window is None:
        return 1

    _logger.info(f"Phase 0-2 完成，耗时 {(time.time() - start_time) * 1000:.0f}ms")

    # ============================================================
    # 进入事件循环
    # ============================================================
    _logger.info("进入事件循环")
    run_until_quit(app, before_close=_close_session)
    _logger.info("应用退出")
    return 0


__all__ = ["run"]
