# src/delivflow/core/config/merge.py
"""
Utilitário canônico de deep-merge de configuração.

Política de merge (v1):
    - dict → merge recursivo por chave
    - list → sobrescrita total (sem merge elemento a elemento)
    - escalar → sobrescrita direta
    - None → sobrescreve ou é sobrescrito sem conflito (valor "não definido")
    - conflito de tipos → erro estrutural explícito

Invariantes:
    - A mesma entrada sempre produz a mesma saída
    - Nenhum input é mutado
    - Conflitos estruturais interrompem o merge
"""

from copy import deepcopy
from typing import Any, Dict

from .errors import ConfigTypeConflictError


def deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """
    Realiza um deep-merge determinístico entre dois dicionários de configuração.

    Esta função combina uma configuração base com um conjunto de overrides
    explícitos, produzindo uma nova estrutura resultante sem mutar
    nenhum dos inputs.

    Diferenças em relação a um merge ingênuo:
        - `None` é tratado como "não definido" e nunca gera conflito
          (ex.: `concurrency: null` sobrescrevendo `concurrency: 4`)
        - int e float são considerados compatíveis entre si
        - `concurrency: "unlimited"` sobrescrevendo um inteiro é aceito,
          pois strings e números não são mesclados recursivamente

    Args:
        base (Dict[str, Any]): Configuração base (ex.: defaults).
        override (Dict[str, Any]): Overrides explícitos da configuração.

    Returns:
        Dict[str, Any]: Nova configuração resultante do deep-merge.

    Raises:
        ConfigTypeConflictError: Se uma chave mapear dict de um lado e
            valor não-dict do outro, ou tipos escalares incompatíveis.
    """

    if not isinstance(base, dict) or not isinstance(override, dict):
        raise ConfigTypeConflictError(
            f"Deep-merge requer dicts no nível raiz, recebido: "
            f"{type(base).__name__} vs {type(override).__name__}"
        )

    result: Dict[str, Any] = deepcopy(base)

    for key, new in override.items():
        old = result.get(key)

        if old is None or new is None:
            result[key] = deepcopy(new)
        elif isinstance(old, dict) and isinstance(new, dict):
            result[key] = deep_merge(old, new)
        elif _scalars_compatible(old, new) or (isinstance(old, list) and isinstance(new, list)):
            result[key] = deepcopy(new)
        else:
            raise ConfigTypeConflictError(
                f"Conflito de tipo na chave '{key}': {type(old).__name__} vs {type(new).__name__}"
            )

    return result


def _scalars_compatible(old: Any, new: Any) -> bool:
    if isinstance(old, (dict, list)) or isinstance(new, (dict, list)):
        return False
    if isinstance(old, bool) or isinstance(new, bool):
        return isinstance(old, bool) and isinstance(new, bool)
    if type(old) is type(new):
        return True
    # sentinelas textuais ("unlimited") intercambiáveis com números
    return isinstance(old, (int, float, str)) and isinstance(new, (int, float, str))
