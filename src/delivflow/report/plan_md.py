"""
src/delivflow/report/plan_md.py

Gerador canônico de `plan.md` (v1) — DelivFlow

Regras:
- O plan.md é derivado EXCLUSIVAMENTE do Plan Manifest (dict).
- Não infere ondas nem artefatos: renderiza o que o snapshot registrou.
- Mesmo Manifest => mesmo plan.md (ordem de estágios e ações preservada,
  demais mapas renderizados com chaves ordenadas).

Estrutura mínima obrigatória:
# Pipeline Plan

## Summary
## Stages
## Artifact Chain
## Warnings
## Event Log
## Plan Metadata
"""

from __future__ import annotations

import json
from typing import Any, Dict, List


REQUIRED_SECTIONS: List[str] = [
    "# Pipeline Plan",
    "## Summary",
    "## Stages",
    "## Artifact Chain",
    "## Warnings",
    "## Event Log",
    "## Plan Metadata",
]


def _as_pretty_json(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False, sort_keys=True, indent=2)


def _require_manifest(manifest: Dict[str, Any]) -> Dict[str, Any]:
    if not isinstance(manifest, dict) or not manifest:
        raise ValueError("Manifest is required to generate plan.md")
    return manifest


def _as_list(value: Any) -> List[Any]:
    return value if isinstance(value, list) else []


def _group_waves(actions: List[Dict[str, Any]]) -> Dict[int, List[Dict[str, Any]]]:
    waves: Dict[int, List[Dict[str, Any]]] = {}
    for action in actions:
        if isinstance(action, dict):
            waves.setdefault(int(action.get("run_order", 0)), []).append(action)
    return waves


def generate_plan_md(manifest: Dict[str, Any]) -> str:
    """Gera o conteúdo completo do plan.md a partir de um snapshot do Manifest."""
    manifest = _require_manifest(manifest)

    pipeline = manifest.get("pipeline") if isinstance(manifest.get("pipeline"), dict) else {}
    inputs = manifest.get("inputs") if isinstance(manifest.get("inputs"), dict) else {}
    stages = _as_list(manifest.get("stages"))
    events = _as_list(manifest.get("events"))
    warnings = _as_list(manifest.get("warnings"))

    lines: List[str] = []

    lines.append("# Pipeline Plan\n")

    lines.append("## Summary")
    lines.append(f"- **Pipeline**: `{pipeline.get('name', '<unknown>')}`")
    lines.append(f"- **Created At (UTC)**: `{pipeline.get('created_at', '<unknown>')}`")
    lines.append(f"- **DelivFlow Version**: `{pipeline.get('delivflow_version', '<unknown>')}`")
    concurrency = pipeline.get("concurrency")
    lines.append(f"- **Concurrency**: `{'unlimited' if concurrency is None else concurrency}`")
    lines.append(f"- **Stages**: `{len(stages)}`")
    lines.append("")

    lines.append("## Stages")
    if stages:
        for stage in stages:
            if not isinstance(stage, dict):
                continue
            lines.append(f"### {stage.get('name', '<unknown>')} (`{stage.get('kind', 'unknown')}`)")
            waves = _group_waves(_as_list(stage.get("actions")))
            if not waves:
                lines.append("No actions recorded for this stage.")
            for run_order in sorted(waves):
                lines.append(f"- **Wave {run_order}**")
                for action in waves[run_order]:
                    source = action.get("input_artifact") or "-"
                    lines.append(
                        f"  - `{action.get('task_id')}` ({action.get('kind')}): "
                        f"`{source}` -> `{action.get('output_artifact')}`"
                    )
            lines.append("")
    else:
        lines.append("No stages recorded in the Manifest.\n")

    lines.append("## Artifact Chain")
    advanced = [
        e for e in events
        if isinstance(e, dict) and e.get("event_type") == "chain_advanced"
    ]
    lines.append(f"- **Current Artifact**: `{pipeline.get('current_artifact', '<unknown>')}`")
    for ev in advanced:
        payload = ev.get("payload") if isinstance(ev.get("payload"), dict) else {}
        lines.append(f"- `{ev.get('stage')}/{ev.get('task_id')}` -> `{payload.get('artifact')}`")
    lines.append("")

    lines.append("## Warnings")
    if warnings:
        for w in warnings:
            if isinstance(w, dict):
                lines.append(f"- **{w.get('stage')}/{w.get('task_id')}**: {w.get('message')}")
    else:
        lines.append("No warnings recorded.")
    lines.append("")

    lines.append("## Event Log")
    lines.append(f"- Events recorded: `{len(events)}`")
    counts: Dict[str, int] = {}
    for ev in events:
        if isinstance(ev, dict):
            key = str(ev.get("event_type", "unknown"))
            counts[key] = counts.get(key, 0) + 1
    for event_type, count in sorted(counts.items()):
        lines.append(f"- `{event_type}`: `{count}`")
    lines.append("")

    lines.append("## Plan Metadata")
    lines.append("### pipeline")
    lines.append("```json")
    lines.append(_as_pretty_json(pipeline))
    lines.append("```")
    lines.append("### inputs")
    lines.append("```json")
    lines.append(_as_pretty_json(inputs))
    lines.append("```")

    content = "\n".join(lines)

    for sec in REQUIRED_SECTIONS:
        if sec not in content:
            raise RuntimeError(f"Plan rendering failed: missing required section: {sec}")

    return content
