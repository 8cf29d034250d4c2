# Stage Views
"""
阶段结果视图

职责：
- Stage1View：各模型的独立回答，每个模型一个标签页
- Stage2View：各模型的互评排名（匿名标签替换为模型名）及汇总排名
- Stage3View：主席模型的最终回答

数据格式（由后端给出，本模块不做校验）：
    stage1: [{"model": str, "response": str}, ...]
    stage2: [{"model": str, "ranking": str, "parsed_ranking": [str, ...]}, ...]
    stage3: {"model": str, "response": str}
    aggregate_rankings: [{"model": str, "average_rank": float, "rankings_count": int}, ...]

缺失或格式错误的字段按空文本显示，视图构造不抛异常。
"""

from typing import Any, Dict, List, Mapping, Optional

from PyQt6.QtCore import Qt
from PyQt6.QtWidgets import (
    QFrame,
    QLabel,
    QTabWidget,
    QVBoxLayout,
    QWidget,
)

from infrastructure.utils.markdown_renderer import render_document
from resources.theme import (
    BORDER_RADIUS_LARGE,
    COLOR_BG_PRIMARY,
    COLOR_RANK_POSITION,
    COLOR_STAGE3_BG,
    COLOR_STAGE3_BORDER,
    COLOR_STAGE_BORDER,
    COLOR_STAGE_TITLE,
    COLOR_TEXT_SECONDARY,
    FONT_FAMILY_CODE,
    FONT_SIZE_SMALL,
    FONT_SIZE_TITLE,
)


# ============================================================
# 纯函数辅助
# ============================================================

def _as_list(value: Any) -> List[Any]:
    return list(value) if isinstance(value, (list, tuple)) else []


def _as_dict(value: Any) -> Dict[str, Any]:
    return dict(value) if isinstance(value, Mapping) else {}


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def short_model_name(model: Any) -> str:
    """
    模型短名称

    "openai/gpt-4o" -> "gpt-4o"；不含 "/" 时原样返回。
    """
    model = _as_text(model)
    parts = model.split("/")
    if len(parts) > 1 and parts[1]:
        return parts[1]
    return model


def de_anonymize_text(text: Any, label_to_model: Optional[Mapping[str, Any]]) -> str:
    """
    把匿名标签（如 "Response A"）替换为加粗的模型短名称
    """
    result = _as_text(text)
    if not isinstance(label_to_model, Mapping):
        return result
    for label, model in label_to_model.items():
        label = _as_text(label)
        if not label:
            continue
        result = result.replace(label, f"**{short_model_name(model)}**")
    return result


def resolve_ranking_label(label: Any, label_to_model: Optional[Mapping[str, Any]]) -> str:
    """解析出的排名项：能映射到模型时显示短名称，否则显示原标签"""
    label = _as_text(label)
    if isinstance(label_to_model, Mapping) and label in label_to_model:
        return short_model_name(label_to_model[label])
    return label


def _format_average(value: Any) -> str:
    try:
        return f"{float(value):.2f}"
    except (TypeError, ValueError):
        return ""


def format_aggregate_rankings(aggregate_rankings: Any) -> List[str]:
    """
    汇总排名格式化为行文本

    每行形如 "#1 gpt-4o  Avg: 1.50  (4 votes)"。
    """
    lines = []
    for position, entry in enumerate(_as_list(aggregate_rankings), start=1):
        entry = _as_dict(entry)
        model = short_model_name(entry.get("model"))
        average = _format_average(entry.get("average_rank"))
        count = _as_text(entry.get("rankings_count"))
        lines.append(f"#{position} {model}  Avg: {average}  ({count} votes)")
    return lines


# ============================================================
# 控件辅助
# ============================================================

def create_markdown_label(text: str, parent: Optional[QWidget] = None) -> QLabel:
    """创建显示 Markdown 的只读富文本标签"""
    label = QLabel(parent)
    label.setTextFormat(Qt.TextFormat.RichText)
    label.setWordWrap(True)
    label.setOpenExternalLinks(True)
    label.setTextInteractionFlags(
        Qt.TextInteractionFlag.TextSelectableByMouse
        | Qt.TextInteractionFlag.LinksAccessibleByMouse
    )
    label.setText(render_document(text))
    return label


def _create_title_label(text: str) -> QLabel:
    label = QLabel(text)
    label.setStyleSheet(f"""
        QLabel {{
            color: {COLOR_STAGE_TITLE};
            font-size: {FONT_SIZE_TITLE}px;
            font-weight: bold;
            background: transparent;
        }}
    """)
    return label


def _create_hint_label(text: str) -> QLabel:
    label = QLabel(text)
    label.setWordWrap(True)
    label.setStyleSheet(f"""
        QLabel {{
            color: {COLOR_TEXT_SECONDARY};
            font-size: {FONT_SIZE_SMALL}px;
            background: transparent;
        }}
    """)
    return label


def _create_model_id_label(model: str) -> QLabel:
    label = QLabel(model)
    label.setStyleSheet(f"""
        QLabel {{
            color: {COLOR_TEXT_SECONDARY};
            font-family: {FONT_FAMILY_CODE};
            font-size: {FONT_SIZE_SMALL}px;
            background: transparent;
        }}
    """)
    label.setTextInteractionFlags(Qt.TextInteractionFlag.TextSelectableByMouse)
    return label


# ============================================================
# 阶段视图基类
# ============================================================

class _StageView(QFrame):
    """阶段视图公共部分：边框、标题、国际化"""

    BG_COLOR = COLOR_BG_PRIMARY
    BORDER_COLOR = COLOR_STAGE_BORDER

    def __init__(self, parent: Optional[QWidget] = None):
        super().__init__(parent)
        self._i18n = None

        self.setObjectName("stageView")
        self.setStyleSheet(f"""
            QFrame#stageView {{
                background-color: {self.BG_COLOR};
                border: 1px solid {self.BORDER_COLOR};
                border-radius: {BORDER_RADIUS_LARGE}px;
            }}
        """)

        self._layout = QVBoxLayout(self)
        self._layout.setContentsMargins(12, 12, 12, 12)
        self._layout.setSpacing(8)

    @property
    def i18n(self):
        if self._i18n is None:
            from shared.service_locator import ServiceLocator
            from shared.service_names import SVC_I18N_MANAGER
            self._i18n = ServiceLocator.get_optional(SVC_I18N_MANAGER)
        return self._i18n

    def _get_text(self, key: str, default: str = "", **kwargs) -> str:
        if self.i18n:
            return self.i18n.get_text(key, default, **kwargs)
        return default.format(**kwargs) if kwargs else default


# ============================================================
# Stage 1
# ============================================================

class Stage1View(_StageView):
    """Stage 1：各模型的独立回答"""

    def __init__(self, responses: Any, parent: Optional[QWidget] = None):
        super().__init__(parent)

        self._tabs = QTabWidget()
        self._layout.addWidget(
            _create_title_label(
                self._get_text("stage1.title", "Stage 1: Individual Responses")
            )
        )

        for item in _as_list(responses):
            item = _as_dict(item)
            model = _as_text(item.get("model"))
            page = QWidget()
            page_layout = QVBoxLayout(page)
            page_layout.setContentsMargins(8, 8, 8, 8)
            page_layout.addWidget(_create_model_id_label(model))
            page_layout.addWidget(create_markdown_label(_as_text(item.get("response"))))
            page_layout.addStretch()
            self._tabs.addTab(page, short_model_name(model))

        self._layout.addWidget(self._tabs)

    @property
    def tabs(self) -> QTabWidget:
        return self._tabs


# ============================================================
# Stage 2
# ============================================================

class Stage2View(_StageView):
    """Stage 2：互评排名与汇总排名"""

    def __init__(
        self,
        rankings: Any,
        label_to_model: Optional[Mapping[str, Any]] = None,
        aggregate_rankings: Any = None,
        parent: Optional[QWidget] = None,
    ):
        super().__init__(parent)

        label_to_model = _as_dict(label_to_model)
        self._tabs = QTabWidget()
        self._aggregate_lines = format_aggregate_rankings(aggregate_rankings)

        self._layout.addWidget(
            _create_title_label(self._get_text("stage2.title", "Stage 2: Peer Rankings"))
        )
        self._layout.addWidget(_create_hint_label(self._get_text(
            "stage2.description",
            "Each model evaluated all responses (anonymized as Response A, B, C, etc.) "
            "and provided rankings. Below, model names are shown in bold for "
            "readability, but the original evaluation used anonymous labels.",
        )))

        for item in _as_list(rankings):
            item = _as_dict(item)
            model = _as_text(item.get("model"))
            self._tabs.addTab(
                self._create_ranking_page(item, model, label_to_model),
                short_model_name(model),
            )
        self._layout.addWidget(self._tabs)

        if self._aggregate_lines:
            self._layout.addWidget(self._create_aggregate_section())

    def _create_ranking_page(
        self,
        item: Dict[str, Any],
        model: str,
        label_to_model: Dict[str, Any],
    ) -> QWidget:
        page = QWidget()
        layout = QVBoxLayout(page)
        layout.setContentsMargins(8, 8, 8, 8)

        layout.addWidget(_create_model_id_label(model))
        layout.addWidget(create_markdown_label(
            de_anonymize_text(item.get("ranking"), label_to_model)
        ))

        parsed = _as_list(item.get("parsed_ranking"))
        if parsed:
            layout.addWidget(_create_hint_label(
                self._get_text("stage2.extracted_ranking", "Extracted Ranking:")
            ))
            ordered = "\n".join(
                f"{i}. {resolve_ranking_label(label, label_to_model)}"
                for i, label in enumerate(parsed, start=1)
            )
            layout.addWidget(create_markdown_label(ordered))

        layout.addStretch()
        return page

    def _create_aggregate_section(self) -> QWidget:
        section = QWidget()
        layout = QVBoxLayout(section)
        layout.setContentsMargins(0, 8, 0, 0)
        layout.setSpacing(4)

        layout.addWidget(_create_title_label(
            self._get_text("stage2.aggregate_title", "Aggregate Rankings (Street Cred)")
        ))
        layout.addWidget(_create_hint_label(self._get_text(
            "stage2.aggregate_description",
            "Combined results across all peer evaluations (lower score is better):",
        )))

        for line in self._aggregate_lines:
            label = QLabel(line)
            label.setStyleSheet(f"QLabel {{ color: {COLOR_RANK_POSITION}; background: transparent; }}")
            layout.addWidget(label)

        return section

    @property
    def tabs(self) -> QTabWidget:
        return self._tabs

    @property
    def aggregate_lines(self) -> List[str]:
        return list(self._aggregate_lines)


# ============================================================
# Stage 3
# ============================================================

class Stage3View(_StageView):
    """Stage 3：主席模型的最终回答"""

    BG_COLOR = COLOR_STAGE3_BG
    BORDER_COLOR = COLOR_STAGE3_BORDER

    def __init__(self, final_response: Any, parent: Optional[QWidget] = None):
        super().__init__(parent)

        final_response = _as_dict(final_response)
        self._chairman = short_model_name(final_response.get("model"))

        self._layout.addWidget(_create_title_label(
            self._get_text("stage3.title", "Stage 3: Final Council Answer")
        ))
        self._layout.addWidget(_create_hint_label(self._get_text(
            "stage3.chairman", "Chairman: {model}", model=self._chairman
        )))
        self._layout.addWidget(
            create_markdown_label(_as_text(final_response.get("response")))
        )

    @property
    def chairman(self) -> str:
        return self._chairman


def create_stage_view(
    stage: int,
    payload: Any,
    label_to_model: Optional[Mapping[str, Any]] = None,
    aggregate_rankings: Any = None,
) -> QWidget:
    """按阶段号创建对应视图"""
    if stage == 1:
        return Stage1View(payload)
    if stage == 2:
        return Stage2View(payload, label_to_model, aggregate_rankings)
    if stage == 3:
        return Stage3View(payload)
    raise ValueError(f"Invalid stage: {stage}")


__all__ = [
    "Stage1View",
    "Stage2View",
    "Stage3View",
    "create_stage_view",
    "create_markdown_label",
    "short_model_name",
    "de_anonymize_text",
    "resolve_ranking_label",
    "format_aggregate_rankings",
]
