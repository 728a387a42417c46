"""
Rastreabilidade do DelivFlow.

Este pacote concentra o Plan Manifest e o Event Log produzidos durante
a construção de um plano. O DelivFlow não usa um logger global: todo
registro relevante vira um evento estruturado no Manifest do pipeline.

Limites explícitos:
    - Não executa pipeline
    - Não decide políticas de registro
"""

from .manifest import (
    PlanManifest,
    create_manifest,
    add_event,
    add_warning,
    save_manifest,
    load_manifest,
)

__all__ = [
    "PlanManifest",
    "create_manifest",
    "add_event",
    "add_warning",
    "save_manifest",
    "load_manifest",
]
