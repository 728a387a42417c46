"""
DelivFlow — Canonical Error Structures (v1)

Este módulo define o padrão canônico de erros do DelivFlow.
Erros de registro são artefatos de domínio e fazem parte do contrato
operacional do planejador, devendo ser:

- explícitos
- serializáveis
- rastreáveis (registrados no Event Log do plano)
- acionáveis

Nenhuma recuperação local é aplicada: o erro é devolvido ao chamador.
"""

from __future__ import annotations

from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional

from .exceptions import (
    DelivException,
    DuplicateArtifactName,
    DuplicateTaskIdentifier,
    InvalidConfiguration,
    StageSuperseded,
    UnsupportedPlatform,
)


# ---------------------------------------------------------------------------
# Payload canônico
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class DelivErrorPayload:
    """
    Payload canônico de erro do DelivFlow.

    Campos:
    - type: código estável do erro (não é texto livre)
    - message: mensagem curta, humana e objetiva
    - details: dados estruturados relevantes para diagnóstico
    - hint: ação sugerida ao operador (onde corrigir)
    """

    type: str
    message: str
    details: Dict[str, Any]
    hint: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Retorna representação serializável do erro."""
        return asdict(self)


# ---------------------------------------------------------------------------
# Catálogo canônico de tipos de erro (v1)
# ---------------------------------------------------------------------------

INVALID_CONFIGURATION = "INVALID_CONFIGURATION"
STAGE_SUPERSEDED = "STAGE_SUPERSEDED"
UNSUPPORTED_PLATFORM = "UNSUPPORTED_PLATFORM"
DUPLICATE_ARTIFACT_NAME = "DUPLICATE_ARTIFACT_NAME"
DUPLICATE_TASK_IDENTIFIER = "DUPLICATE_TASK_IDENTIFIER"
PLAN_CONSTRUCTION_ERROR = "PLAN_CONSTRUCTION_ERROR"

# Ordem importa: subclasses antes das bases.
_EXCEPTION_CODES = (
    (StageSuperseded, STAGE_SUPERSEDED),
    (InvalidConfiguration, INVALID_CONFIGURATION),
    (UnsupportedPlatform, UNSUPPORTED_PLATFORM),
    (DuplicateArtifactName, DUPLICATE_ARTIFACT_NAME),
    (DuplicateTaskIdentifier, DUPLICATE_TASK_IDENTIFIER),
)


# ---------------------------------------------------------------------------
# Helpers de fábrica
# ---------------------------------------------------------------------------

def invalid_configuration(
    *,
    field_name: str,
    value: Any,
    expected: str,
    hint: str = "Corrija o valor indicado antes de registrar a tarefa. Nenhuma correção automática é aplicada.",
) -> InvalidConfiguration:
    return InvalidConfiguration(
        message=f"Invalid value for '{field_name}': expected {expected}",
        details={
            "field": field_name,
            "value": repr(value),
            "expected": expected,
        },
        hint=hint,
    )


def unsupported_platform(
    *,
    feature: str,
    platform: str,
    task_id: Optional[str] = None,
    hint: str = "Use uma plataforma da família Linux ou remova a opção incompatível.",
) -> UnsupportedPlatform:
    return UnsupportedPlatform(
        message=f"{feature} is not supported on {platform}",
        details={
            "feature": feature,
            "platform": platform,
            "task_id": task_id,
        },
        hint=hint,
    )


def stage_superseded(
    *,
    stage: str,
    last_stage: str,
    task_id: str,
    hint: str = "Registre as tarefas na ordem Source → Build → Test → Publish.",
) -> StageSuperseded:
    return StageSuperseded(
        message=f"Stage '{stage}' was already superseded by '{last_stage}'",
        details={
            "stage": stage,
            "last_stage": last_stage,
            "task_id": task_id,
        },
        hint=hint,
    )


def duplicate_artifact_name(
    *,
    artifact: str,
    producer: Optional[str] = None,
    hint: str = "Escolha outro nome de artefato de saída ou omita-o para usar o nome determinístico.",
) -> DuplicateArtifactName:
    return DuplicateArtifactName(
        message=f"Duplicate artifact name: {artifact}",
        details={
            "artifact": artifact,
            "producer": producer,
        },
        hint=hint,
    )


def duplicate_task_identifier(
    *,
    task_id: str,
    stage: str,
    hint: str = "Identificadores de tarefa devem ser únicos dentro do estágio.",
) -> DuplicateTaskIdentifier:
    return DuplicateTaskIdentifier(
        message=f"Duplicate task id '{task_id}' in stage '{stage}'",
        details={
            "task_id": task_id,
            "stage": stage,
        },
        hint=hint,
    )


def to_error_payload(exc: Exception) -> DelivErrorPayload:
    """Converte exceções em DelivErrorPayload (serializável, acionável).

    Regras:
    - DelivException: código estável derivado do tipo, mais message/details/hint.
    - Outras exceções: encapsuladas como PLAN_CONSTRUCTION_ERROR sem stack trace.
    """
    if isinstance(exc, DelivException):
        code = PLAN_CONSTRUCTION_ERROR
        for exc_type, exc_code in _EXCEPTION_CODES:
            if isinstance(exc, exc_type):
                code = exc_code
                break
        return DelivErrorPayload(
            type=code,
            message=exc.message,
            details=dict(exc.details or {}),
            hint=exc.hint,
        )

    return DelivErrorPayload(
        type=PLAN_CONSTRUCTION_ERROR,
        message=str(exc) or "Erro inesperado durante a construção do plano",
        details={"exception_class": exc.__class__.__name__},
        hint="Verifique os argumentos passados à operação de registro",
    )
