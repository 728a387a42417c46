# src/delivflow/core/plan/run_order.py
"""
Alocador de run order (ondas) do DelivFlow.

Dado o índice de uma tarefa dentro do seu estágio e o limite de
concorrência do plano, determina a onda em que a tarefa executa:

    wave = floor(index / concurrency) + 1

Garantias:
    - os primeiros `concurrency` índices caem na onda 1, os próximos na 2, ...
    - todas as ondas são completas, exceto possivelmente a última
    - concorrência ilimitada (`None`) coloca todas as tarefas na onda 1

Função pura: sem efeitos colaterais, determinística.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from delivflow.core.errors import invalid_configuration

# Sentinela textual aceita na configuração para concorrência ilimitada.
UNLIMITED = "unlimited"


def normalize_concurrency(concurrency: Any) -> Optional[int]:
    """
    Normaliza o limite de concorrência para `int` positivo ou `None` (ilimitado).

    Raises:
        InvalidConfiguration: para zero, negativos, booleanos ou tipos inválidos.
    """
    if concurrency is None:
        return None
    if isinstance(concurrency, str) and concurrency.strip().lower() == UNLIMITED:
        return None
    if isinstance(concurrency, bool) or not isinstance(concurrency, int) or concurrency <= 0:
        raise invalid_configuration(
            field_name="concurrency",
            value=concurrency,
            expected=f"a positive integer, None or '{UNLIMITED}'",
        )
    return concurrency


def determine_run_order(index: int, concurrency: Optional[int] = None) -> int:
    """
    Calcula a onda (run order, base 1) de uma tarefa dentro do estágio.

    Args:
        index: posição da tarefa no estágio (0, 1, 2, ...).
        concurrency: máximo de tarefas por onda; `None` significa ilimitado.

    Returns:
        int: número da onda, sempre >= 1.

    Raises:
        InvalidConfiguration: se `concurrency <= 0` ou `index` for negativo.
    """
    if isinstance(index, bool) or not isinstance(index, int) or index < 0:
        raise invalid_configuration(field_name="index", value=index, expected="a non-negative integer")

    limit = normalize_concurrency(concurrency)
    if limit is None:
        return 1

    return index // limit + 1


def group_into_waves(task_ids: List[str], concurrency: Optional[int] = None) -> Dict[int, List[str]]:
    """Agrupa ids de tarefa (em ordem de registro) por onda."""
    waves: Dict[int, List[str]] = {}
    for index, task_id in enumerate(task_ids):
        waves.setdefault(determine_run_order(index, concurrency), []).append(task_id)
    return waves
