# tests/core/config/test_merge.py
"""
Testes da política de deep-merge de configuração.

Este módulo valida o comportamento da função `deep_merge`, responsável
por resolver a configuração efetiva do pipeline a partir dos defaults
e de um conjunto de overrides explícitos.

Os testes asseguram que:
- valores escalares são sobrescritos corretamente
- dicionários são mesclados de forma recursiva
- listas são sobrescritas integralmente
- `None` e a sentinela "unlimited" não geram conflito
- conflitos de tipo são detectados e rejeitados explicitamente
- objetos de entrada não são mutados durante o merge

Invariantes:
    - Chaves não sobrescritas são preservadas
    - Nenhum merge parcial é produzido em caso de erro

Limites explícitos:
    - Não valida carregamento de arquivos YAML
    - Não valida semântica dos settings
"""

import copy

import pytest

try:
    from delivflow.core.config.merge import deep_merge
    from delivflow.core.config.errors import ConfigTypeConflictError
except Exception as e:  # noqa: BLE001
    deep_merge = None
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


def _require_imports():
    """Falha explicitamente quando a política de merge não pode ser importada."""
    if _IMPORT_ERR is not None:
        pytest.fail(
            "Missing merge module. Implement:\n"
            "- src/delivflow/core/config/merge.py (deep_merge)\n"
            "- src/delivflow/core/config/errors.py (ConfigTypeConflictError)\n"
            f"Import error: {_IMPORT_ERR}"
        )


def test_merge_simple_override():
    _require_imports()
    out = deep_merge({"pipeline": {"auto_build": False}}, {"pipeline": {"auto_build": True}})
    assert out == {"pipeline": {"auto_build": True}}


def test_merge_nested_dict_preserves_untouched_keys():
    _require_imports()
    base = {"shell": {"platform": "linux_ubuntu", "alarm": {"threshold": 1, "period_sec": 300}}}
    override = {"shell": {"alarm": {"threshold": 3}}}

    out = deep_merge(base, override)

    assert out["shell"]["platform"] == "linux_ubuntu"
    assert out["shell"]["alarm"] == {"threshold": 3, "period_sec": 300}


def test_merge_list_override_total():
    """
    Listas são substituídas integralmente, nunca concatenadas.

    Decisões arquiteturais:
        - Não há heurística de merge para listas
    """
    _require_imports()
    out = deep_merge({"events": ["PUSH", "PULL_REQUEST_CREATED"]}, {"events": ["PUSH"]})
    assert out["events"] == ["PUSH"]


def test_merge_does_not_mutate_inputs():
    _require_imports()
    base = {"pipeline": {"name": "a", "auto_build_options": {"public_logs": False}}}
    override = {"pipeline": {"auto_build_options": {"public_logs": True}}}
    base_copy, override_copy = copy.deepcopy(base), copy.deepcopy(override)

    deep_merge(base, override)

    assert base == base_copy
    assert override == override_copy


def test_merge_accepts_unlimited_sentinel_and_none():
    _require_imports()
    assert deep_merge({"concurrency": 4}, {"concurrency": "unlimited"}) == {"concurrency": "unlimited"}
    assert deep_merge({"concurrency": "unlimited"}, {"concurrency": 2}) == {"concurrency": 2}
    assert deep_merge({"concurrency": 4}, {"concurrency": None}) == {"concurrency": None}


@pytest.mark.parametrize(
    "base, override",
    [
        ({"shell": {"alarm": {}}}, {"shell": {"alarm": 3}}),
        ({"events": ["PUSH"]}, {"events": "PUSH"}),
        ({"privileged": False}, {"privileged": 1}),
        ({"name": "p"}, {"name": True}),
    ],
)
def test_merge_type_conflict_raises(base, override):
    _require_imports()
    with pytest.raises(ConfigTypeConflictError):
        deep_merge(base, override)
