import json
import math
from dataclasses import dataclass, field
from typing import Any, Optional

DISMISSAL_KEY = "dismissed-congrats-targets"


@dataclass(frozen=True)
class DismissalState:
    """축하 알림을 이미 닫은 milestone target_count 집합. 추가만 되고 비워지지 않는다."""
    targets: frozenset[int] = field(default_factory=frozenset)

    def is_dismissed(self, target: int) -> bool:
        return target in self.targets


def load_dismissal_state(raw: Optional[str]) -> DismissalState:
    """
    저장소의 JSON 문자열을 상태로 복원한다.
    값이 없거나 깨져 있으면 빈 상태로 진행한다.
    """
    if not raw:
        return DismissalState()
    try:
        parsed: Any = json.loads(raw)
    except (TypeError, ValueError):
        return DismissalState()
    if not isinstance(parsed, list):
        return DismissalState()
    return DismissalState(targets=frozenset(int(value) for value in parsed if _is_finite_number(value)))


def merge_dismissal(state: DismissalState, target: int) -> DismissalState:
    return DismissalState(targets=state.targets | {int(target)})


def dump_dismissal_state(state: DismissalState) -> str:
    return json.dumps(sorted(state.targets))


def _is_finite_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)
