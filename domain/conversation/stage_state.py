# Stage State Machine
"""
助手轮次的阶段状态机

每个助手轮次的每个阶段（1/2/3）各自是一个独立的三态状态机：

    PENDING ──► IN_FLIGHT ──► COMPLETE
       └─────────────────────────┘

- PENDING：既未加载也无结果（外部系统跳过的阶段也停留在此）
- IN_FLIGHT：loading.stageN 为真
- COMPLETE：stageN 结果已写入，终态

状态按 (turn_id, stage) 为键存放在 StageStateTable 中，
阶段之间互不约束，渲染也互不阻塞。
"""

import logging
from enum import Enum
from typing import Dict, Iterable, Iterator, Tuple

from domain.conversation.turn import STAGES, Turn


logger = logging.getLogger(__name__)


class StageStatus(Enum):
    """单个阶段的状态"""
    PENDING = "pending"
    IN_FLIGHT = "in_flight"
    COMPLETE = "complete"


# 状态顺序，用于判断是否回退
_STATUS_ORDER = {
    StageStatus.PENDING: 0,
    StageStatus.IN_FLIGHT: 1,
    StageStatus.COMPLETE: 2,
}


def derive_stage_status(turn: Turn, stage: int) -> StageStatus:
    """
    根据轮次字段推导阶段状态

    结果已写入时视为 COMPLETE，即使加载标志尚未清除。
    """
    if turn.has_stage_result(stage):
        return StageStatus.COMPLETE
    if turn.loading.is_loading(stage):
        return StageStatus.IN_FLIGHT
    return StageStatus.PENDING


StageKey = Tuple[str, int]


class StageStateTable:
    """
    阶段状态表

    以 (turn_id, stage) 为键记录每个阶段的状态。
    COMPLETE 为终态，观察到的回退会被忽略并记录警告。
    """

    def __init__(self):
        self._states: Dict[StageKey, StageStatus] = {}

    def get(self, turn_id: str, stage: int) -> StageStatus:
        return self._states.get((turn_id, stage), StageStatus.PENDING)

    def transition(self, turn_id: str, stage: int, status: StageStatus) -> StageStatus:
        """
        尝试迁移阶段状态

        Returns:
            迁移后的实际状态
        """
        if stage not in STAGES:
            raise ValueError(f"Invalid stage: {stage}")

        key = (turn_id, stage)
        current = self._states.get(key, StageStatus.PENDING)

        if current == StageStatus.COMPLETE and status != StageStatus.COMPLETE:
            logger.warning(
                f"Ignoring stage regression for turn {turn_id} stage {stage}: "
                f"{current.value} -> {status.value}"
            )
            return current

        if _STATUS_ORDER[status] < _STATUS_ORDER[current]:
            # IN_FLIGHT -> PENDING：外部系统撤销了加载标志，按当前数据为准
            logger.debug(
                f"Stage {stage} of turn {turn_id} went back to {status.value}"
            )

        self._states[key] = status
        return status

    def observe(self, turn: Turn) -> Dict[int, StageStatus]:
        """
        根据轮次当前字段更新三个阶段的状态

        Returns:
            {stage: status}
        """
        result: Dict[int, StageStatus] = {}
        for stage in STAGES:
            result[stage] = self.transition(
                turn.id, stage, derive_stage_status(turn, stage)
            )
        return result

    def retain(self, turn_ids: Iterable[str]) -> int:
        """
        只保留给定轮次的状态

        后端消息不带 id，每次重新拉取都会生成新的轮次 id，旧键需要清掉。

        Returns:
            移除的条目数
        """
        keep = set(turn_ids)
        stale = [key for key in self._states if key[0] not in keep]
        for key in stale:
            del self._states[key]
        return len(stale)

    def clear(self) -> None:
        self._states.clear()

    def __len__(self) -> int:
        return len(self._states)

    def __iter__(self) -> Iterator[Tuple[StageKey, StageStatus]]:
        return iter(list(self._states.items()))


__all__ = [
    "StageStatus",
    "StageStateTable",
    "derive_stage_status",
]
