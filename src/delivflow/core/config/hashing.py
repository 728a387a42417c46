# src/delivflow/core/config/hashing.py
"""
Hashing canônico do DelivFlow.

Este módulo gera hashes determinísticos a partir de estruturas JSON
canônicas. O mesmo mecanismo identifica:
    - a configuração efetiva de um pipeline (rastreabilidade no Manifest)
    - a identidade de uma tarefa, usada para derivar nomes de artefatos
      estáveis entre reconstruções do mesmo plano

Política de hashing (v1):
    - Serialização JSON canônica (chaves ordenadas, separadores compactos)
    - Codificação UTF-8
    - SHA-256 em hexadecimal (64 caracteres)
"""


import json
import hashlib
from typing import Dict, Any


def compute_config_hash(config: Dict[str, Any]) -> str:
    """
    Gera um hash determinístico de um dicionário serializável.

    Estruturalmente equivalentes produzem o mesmo hash, independentemente
    da ordem original das chaves.

    Args:
        config (Dict[str, Any]): Configuração (ou identidade) a ser hasheada.

    Returns:
        str: Hash SHA-256 hexadecimal.

    Raises:
        TypeError: Se o objeto fornecido não for um dicionário.
    """

    if not isinstance(config, dict):
        raise TypeError(
            f"Config para hashing deve ser dict, recebido: {type(config).__name__}"
        )

    canonical_json = json.dumps(
        config,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
    )

    return hashlib.sha256(canonical_json.encode("utf-8")).hexdigest()


def short_identity_hash(identity: Dict[str, Any], length: int = 8) -> str:
    """Prefixo em maiúsculas do hash canônico, usado como sufixo de nomes gerados."""
    return compute_config_hash(identity)[:length].upper()
