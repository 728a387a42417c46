# src/delivflow/core/traceability/manifest.py
"""
Plan Manifest v1 — rastreabilidade da construção de um plano no DelivFlow.

O Manifest consolida, de forma determinística e auditável:
    - metadados do pipeline (nome, versão do DelivFlow, repositório)
    - hash da configuração efetiva
    - snapshot dos estágios, ações, ondas e artefatos
    - Event Log ordenado de eventos de registro
    - warnings não fatais detectados durante o registro

Princípios fundamentais:
    - Nenhum evento é emitido implicitamente pelas funções deste módulo
    - A ordem do Event Log reflete a ordem real das chamadas de registro
    - O Manifest é serializável e reconstruível (round-trip JSON)

Decisões arquiteturais:
    - UTC é o timezone canônico para todos os timestamps
    - O formato de persistência é JSON determinístico (chaves ordenadas)

Limites explícitos:
    - Não valida o plano
    - Não gera descritores de provedor
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union


def _ensure_tzaware_utc(dt: datetime) -> datetime:
    """
    Normaliza um timestamp para timezone-aware em UTC.

    Timestamps timezone-naive são assumidos como UTC; os demais são convertidos.
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def _iso(dt: datetime) -> str:
    return _ensure_tzaware_utc(dt).isoformat()


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class PlanManifest:
    """
    Registro de construção de um plano de pipeline.

    Campos principais:
        - pipeline: metadados (name, delivflow_version, created_at, repo)
        - inputs: hash da configuração efetiva
        - stages: snapshot dos estágios (preenchido por `Pipeline.to_manifest`)
        - events: Event Log ordenado
        - warnings: avisos não fatais

    Invariantes:
        - `events` e `warnings` são listas ordenadas
        - A estrutura completa é serializável
    """

    pipeline: Dict[str, Any]
    inputs: Dict[str, Any]
    stages: List[Dict[str, Any]] = field(default_factory=list)
    events: List[Dict[str, Any]] = field(default_factory=list)
    warnings: List[Dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Cópia serializável e independente do estado interno."""
        return json.loads(json.dumps(
            {
                "pipeline": self.pipeline,
                "inputs": self.inputs,
                "stages": self.stages,
                "events": self.events,
                "warnings": self.warnings,
            },
            ensure_ascii=False,
        ))

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PlanManifest":
        """Reconstrução permissiva e estrutural; campos ausentes viram vazios."""
        return cls(
            pipeline=dict(data.get("pipeline", {}) or {}),
            inputs=dict(data.get("inputs", {}) or {}),
            stages=[dict(s) for s in (data.get("stages", []) or [])],
            events=[dict(e) for e in (data.get("events", []) or [])],
            warnings=[dict(w) for w in (data.get("warnings", []) or [])],
        )


def create_manifest(
    *,
    pipeline_name: str,
    delivflow_version: str,
    config_hash: Optional[str],
    created_at: Optional[datetime] = None,
    repo: Optional[Dict[str, Any]] = None,
) -> PlanManifest:
    """
    Cria o Manifest inicial de um plano.

    ⚠️ Importante: esta função **não emite eventos implicitamente**.
    O Event Log inicia vazio.
    """
    return PlanManifest(
        pipeline={
            "name": pipeline_name,
            "delivflow_version": delivflow_version,
            "created_at": _iso(created_at or _now()),
            "repo": dict(repo) if repo else None,
        },
        inputs={"config_hash": config_hash},
    )


def _get_manifest(manifest: Union[PlanManifest, Dict[str, Any]]) -> Tuple[PlanManifest, bool]:
    if isinstance(manifest, PlanManifest):
        return manifest, False
    return PlanManifest.from_dict(manifest), True


def _sync_back(manifest: Union[PlanManifest, Dict[str, Any]], m: PlanManifest, is_dict: bool) -> None:
    if is_dict:
        manifest.clear()  # type: ignore[union-attr]
        manifest.update(m.to_dict())  # type: ignore[union-attr]


def add_event(
    manifest: Union[PlanManifest, Dict[str, Any]],
    *,
    event_type: str,
    ts: Optional[datetime] = None,
    stage: Optional[str] = None,
    task_id: Optional[str] = None,
    payload: Optional[Dict[str, Any]] = None,
) -> None:
    """
    Adiciona um evento explícito ao Event Log.

    Cada chamada adiciona exatamente um evento; eventos não são
    reordenados nem deduplicados.

    Args:
        manifest: Manifest (objeto ou dict) a ser atualizado.
        event_type: tipo semântico (ex.: stage_created, task_registered).
        ts: timestamp do evento (padrão: agora, UTC).
        stage: estágio associado, se aplicável.
        task_id: tarefa associada, se aplicável.
        payload: dados adicionais do evento.
    """
    m, is_dict = _get_manifest(manifest)

    ev: Dict[str, Any] = {"event_type": event_type, "timestamp": _iso(ts or _now())}
    if stage is not None:
        ev["stage"] = stage
    if task_id is not None:
        ev["task_id"] = task_id
    if payload is not None:
        ev["payload"] = payload

    m.events.append(ev)
    _sync_back(manifest, m, is_dict)


def add_warning(
    manifest: Union[PlanManifest, Dict[str, Any]],
    *,
    stage: str,
    task_id: str,
    message: str,
) -> None:
    m, is_dict = _get_manifest(manifest)
    m.warnings.append({"stage": stage, "task_id": task_id, "message": message})
    _sync_back(manifest, m, is_dict)


def save_manifest(manifest: Union[PlanManifest, Dict[str, Any]], path: Path) -> None:
    """Persiste o Manifest em JSON determinístico (UTF-8, chaves ordenadas)."""
    m, _ = _get_manifest(manifest)
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        json.dumps(m.to_dict(), ensure_ascii=False, sort_keys=True, indent=2),
        encoding="utf-8",
    )


def load_manifest(path: Path) -> PlanManifest:
    """Carrega um Manifest persistido por `save_manifest`."""
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    return PlanManifest.from_dict(data)
