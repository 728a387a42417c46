# src/delivflow/core/config/__init__.py

"""
Camada de configuração do DelivFlow.

Este pacote contém as estruturas e utilitários responsáveis por carregar,
mesclar, identificar e interpretar a configuração de um pipeline.

A configuração no DelivFlow é:
    - declarativa (YAML ou JSON)
    - determinística
    - separada das tarefas registradas no plano

Responsabilidades do pacote:
    - Carregamento de arquivos de configuração (defaults + overrides locais)
    - Resolução de configuração final via deep-merge determinístico
    - Geração de hash canônico para rastreabilidade e nomes de artefatos
    - Conversão da configuração em `PipelineSettings` validados

Limites explícitos:
    - Não registra tarefas
    - Não interage com backends de recursos
"""

from .errors import (
    ConfigError,
    ConfigTypeConflictError,
    DefaultsNotFoundError,
    InvalidConfigRootTypeError,
    UnsupportedConfigFormatError,
)
from .hashing import compute_config_hash
from .loader import find_config_files, load_config
from .merge import deep_merge
from .settings import (
    DEFAULT_SETTINGS,
    PipelineSettings,
    load_settings,
    load_settings_from_directory,
    resolve_settings,
)

__all__ = [
    "ConfigError",
    "ConfigTypeConflictError",
    "DefaultsNotFoundError",
    "InvalidConfigRootTypeError",
    "UnsupportedConfigFormatError",
    "compute_config_hash",
    "find_config_files",
    "load_config",
    "deep_merge",
    "DEFAULT_SETTINGS",
    "PipelineSettings",
    "load_settings",
    "load_settings_from_directory",
    "resolve_settings",
]
