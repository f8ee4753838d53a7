"""
Persist the generated artifacts.

Generation happens in memory; this is the explicit step that writes the SDL
and an operations manifest to disk for clients and reviewers.
"""

import json
import subprocess
from pathlib import Path
from typing import Any, Dict, List

from autogql.runtime.observability import get_logger, log_event
from autogql.runtime.pipeline import GeneratedApi
from autogql.runtime.schema_generator import create_name, read_multiple_name, read_name, update_name

LOG = get_logger("autogql.exporter")


def git_sha() -> str:
    try:
        return subprocess.check_output(
            ["git", "rev-parse", "HEAD"], stderr=subprocess.DEVNULL
        ).decode().strip()
    except (OSError, subprocess.CalledProcessError):
        return "unknown"


def build_manifest(api: GeneratedApi) -> Dict[str, Any]:
    entities: List[Dict[str, Any]] = []
    for model in api.models:
        entities.append({
            "entity": model.name,
            "primary_key": model.primary_key.name,
            "fields": model.field_names,
            "create_fields": [f.name for f in model.create_fields],
            "queries": [read_name(model.name), read_multiple_name(model.name)],
            "mutations": [create_name(model.name), update_name(model.name)],
        })
    return {
        "git_sha": git_sha(),
        "entities": entities,
        "query": list(api.resolvers.query.keys()),
        "mutation": list(api.resolvers.mutation.keys()),
    }


def export(api: GeneratedApi, out_dir: str) -> Dict[str, str]:
    out = Path(out_dir)
    out.mkdir(parents=True, exist_ok=True)

    sdl_path = out / "schema.graphql"
    sdl_path.write_text(api.sdl)

    manifest_path = out / "manifest.json"
    manifest_path.write_text(json.dumps(build_manifest(api), indent=2))

    log_event(LOG, "export", schema=str(sdl_path), manifest=str(manifest_path))
    return {"schema": str(sdl_path), "manifest": str(manifest_path)}
