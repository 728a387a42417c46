# src/delivflow/core/shell/alarm.py
"""
Alarme de saúde associado a cada tarefa materializada.

O alarme observa a métrica de contagem de falhas da tarefa e entra em
estado de alarme quando as falhas dentro de `period_sec` atingem
`threshold` em `evaluation_periods` janelas consecutivas.

É um efeito colateral de monitoramento: não bloqueia nem repete a tarefa.
O core fornece apenas a tupla de configuração ao Alarm Backend.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Sequence

from delivflow.core.plan.types import AlarmOptions


COMPARISON_GTE = "GreaterThanOrEqualToThreshold"


@dataclass(frozen=True)
class MetricReference:
    task_id: str
    metric_name: str = "FailedBuilds"
    statistic: str = "Sum"


@dataclass(frozen=True)
class AlarmDefinition:
    alarm_id: str
    metric: MetricReference
    evaluation_periods: int
    threshold: int
    period_sec: int
    comparison: str = COMPARISON_GTE

    def breaches(self, failures_per_window: Sequence[int]) -> bool:
        """Avalia a regra do alarme sobre contagens de falha por janela (mais recente por último)."""
        if len(failures_per_window) < self.evaluation_periods:
            return False
        recent = failures_per_window[-self.evaluation_periods:]
        return all(count >= self.threshold for count in recent)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def alarm_for(task_id: str, options: AlarmOptions) -> AlarmDefinition:
    return AlarmDefinition(
        alarm_id=f"{task_id}-failures",
        metric=MetricReference(task_id=task_id),
        evaluation_periods=options.evaluation_periods,
        threshold=options.threshold,
        period_sec=options.period_sec,
    )
