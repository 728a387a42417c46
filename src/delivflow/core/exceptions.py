"""
DelivFlow — Canonical Exceptions (v1)

Este módulo define as exceções tipadas levantadas durante a construção
do plano de um pipeline.

Objetivo:
- Sinalizar configurações inválidas no exato ponto de registro
- Facilitar o mapeamento determinístico para DelivErrorPayload
- Evitar ValueError/RuntimeError genéricos em guardrails críticos

Regras:
- Nenhuma exceção é levantada em tempo de execução de tarefas (o core não executa).
- Exceções carregam apenas dados estruturados (serializáveis) em `details`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class DelivException(Exception):
    """Base class para exceções internas do DelivFlow.

    Importante:
    - Sempre carregar dados estruturados em `details`
    - Mensagem deve ser curta e humana
    """

    message: str
    details: Dict[str, Any] = field(default_factory=dict)
    hint: Optional[str] = None

    def __str__(self) -> str:  # pragma: no cover
        return self.message


# ---------------------------------------------------------------------------
# Configuração
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class InvalidConfiguration(DelivException):
    """Concorrência não positiva ou especificação de tarefa estruturalmente inválida."""


@dataclass(frozen=True)
class StageSuperseded(InvalidConfiguration):
    """Tarefa endereçada a um estágio que já foi sucedido por um estágio posterior."""


# ---------------------------------------------------------------------------
# Plataforma
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class UnsupportedPlatform(DelivException):
    """Recurso solicitado (ex.: assume role) não suportado pela plataforma da tarefa."""


# ---------------------------------------------------------------------------
# Unicidade
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class DuplicateArtifactName(DelivException):
    """Nome de artefato já utilizado no plano."""


@dataclass(frozen=True)
class DuplicateTaskIdentifier(DelivException):
    """Identificador de tarefa já utilizado no mesmo estágio."""
