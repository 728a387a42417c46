# src/delivflow/core/config/loader.py
"""
Loader de configuração do pipeline.

Fontes, em ordem de prioridade crescente:
    - arquivo de defaults do projeto (obrigatório)
    - arquivo local de overrides (opcional, ignorado quando ausente)

Os arquivos podem ser YAML (`.yaml`, `.yml`) ou JSON (`.json`). Um
documento vazio equivale a `{}`. O resultado é sempre um `dict` puro,
pronto para `settings.resolve_settings`.

Convenção de diretório (`find_config_files`):
    config/pipeline.defaults.yaml
    config/pipeline.local.yaml

Limites explícitos:
    - Não valida semântica (ver `settings.resolve_settings`)
    - Não lê variáveis de ambiente
"""

import json
from pathlib import Path
from typing import Any, Callable, Dict, Optional, TextIO, Tuple, Union

import yaml  # PyYAML

from .errors import (
    DefaultsNotFoundError,
    InvalidConfigRootTypeError,
    UnsupportedConfigFormatError,
)
from .merge import deep_merge


PathLike = Union[str, Path]

DEFAULTS_STEM = "pipeline.defaults"
LOCAL_STEM = "pipeline.local"

_PARSERS: Dict[str, Callable[[TextIO], Any]] = {
    ".yaml": yaml.safe_load,
    ".yml": yaml.safe_load,
    ".json": json.load,
}


def _parse(path: Path) -> Dict[str, Any]:
    parser = _PARSERS.get(path.suffix.lower())
    if parser is None:
        raise UnsupportedConfigFormatError(
            f"Formato não suportado: {path.suffix or '<sem extensão>'} "
            f"(aceitos: {', '.join(sorted(_PARSERS))})"
        )

    with path.open("r", encoding="utf-8") as fh:
        document = parser(fh)

    if document is None:
        return {}
    if not isinstance(document, dict):
        raise InvalidConfigRootTypeError(
            f"Config root deve ser dict em {path.name}, recebido: {type(document).__name__}"
        )
    return document


def load_config(
    *,
    defaults_path: PathLike,
    local_path: Optional[PathLike] = None,
) -> Dict[str, Any]:
    """
    Carrega os defaults e aplica o arquivo local, se existir.

    Raises:
        DefaultsNotFoundError: arquivo de defaults inexistente.
        UnsupportedConfigFormatError: extensão fora de YAML/JSON.
        InvalidConfigRootTypeError: documento cuja raiz não é um mapeamento.
        ConfigTypeConflictError: conflito estrutural entre defaults e local.
    """
    defaults_file = Path(defaults_path)
    if not defaults_file.is_file():
        raise DefaultsNotFoundError(f"Arquivo de defaults não encontrado: {defaults_file}")

    config = _parse(defaults_file)

    if local_path is None:
        return config
    local_file = Path(local_path)
    if not local_file.is_file():
        return config
    return deep_merge(config, _parse(local_file))


def find_config_files(directory: PathLike) -> Tuple[Path, Optional[Path]]:
    """
    Localiza `pipeline.defaults.*` e `pipeline.local.*` em um diretório.

    A primeira extensão encontrada na ordem yaml, yml, json vence.
    """
    root = Path(directory)

    def _first(stem: str) -> Optional[Path]:
        for suffix in (".yaml", ".yml", ".json"):
            candidate = root / f"{stem}{suffix}"
            if candidate.is_file():
                return candidate
        return None

    defaults = _first(DEFAULTS_STEM)
    if defaults is None:
        raise DefaultsNotFoundError(f"Nenhum {DEFAULTS_STEM}.(yaml|yml|json) em {root}")
    return defaults, _first(LOCAL_STEM)
