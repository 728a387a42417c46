# src/delivflow/core/config/errors.py
"""
Exceções da camada de configuração do DelivFlow.

As exceções aqui definidas representam falhas estruturais no carregamento
e na resolução de arquivos de configuração. Valores semanticamente
inválidos (ex.: concorrência não positiva) não pertencem a este módulo:
são sinalizados por `InvalidConfiguration` no momento em que o valor é
aplicado ao plano.

Invariantes:
    - Todas as exceções de configuração herdam de `ConfigError`
    - Nenhuma exceção representa erro de registro de tarefa
"""


class ConfigError(Exception):
    """
    Exceção base para erros estruturais de configuração.

    Permite captura genérica de falhas de load/merge, distinta das
    exceções de registro do plano.
    """


class DefaultsNotFoundError(ConfigError):
    """
    O arquivo de configuração base (defaults) não foi encontrado.

    O arquivo de defaults é obrigatório quando informado; nenhum default
    é inferido a partir de um caminho inexistente.
    """


class UnsupportedConfigFormatError(ConfigError):
    """
    O formato do arquivo de configuração não é suportado.

    Formatos suportados (v1):
        - YAML (.yaml, .yml)
        - JSON (.json)
    """


class InvalidConfigRootTypeError(ConfigError):
    """
    O conteúdo raiz da configuração não é um dicionário (`dict`).

    Listas ou valores escalares no root são rejeitados, sem tentativa
    de normalização.
    """


class ConfigTypeConflictError(ConfigError):
    """
    Conflito de tipos durante o deep-merge.

    Exemplo de conflito:
        - base:     {"pipeline": {"auto_build": false}}
        - override: {"pipeline": "fast"}

    Nenhum merge parcial é produzido e nenhuma coerção é aplicada.
    """
