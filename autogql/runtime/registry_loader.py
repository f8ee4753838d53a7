from pathlib import Path
from typing import Any, Dict, Iterator, List, Tuple

import yaml

from autogql.runtime.model_introspector import EntityDescriptor


class Registry:
    """Entity descriptors declared in registry/*.yaml.

    Each file holds an ``entities`` mapping (or a list of single-key mappings):

        entities:
          User:
            table: users
            attributes:
              id: {type: INTEGER, primary_key: true, auto_increment: true}
              name: {type: STRING, allow_null: false}
    """

    def __init__(self, root: str = "registry"):
        self.root = root
        self.docs = self._load_all()

    def _load_yaml(self, p: Path) -> Dict[str, Any]:
        with p.open("r") as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ValueError(f"{p.name}: top level must be a mapping, got {type(data).__name__}")
        return data

    def _load_all(self) -> List[Tuple[str, Dict[str, Any]]]:
        root = Path(self.root)
        if not root.is_dir():
            raise RuntimeError(f"Registry directory not found: {self.root}")
        docs = []
        # sorted so the generated document is stable across filesystems
        for p in sorted(root.glob("*.yaml")):
            if p.name == "_settings.yaml":
                continue
            docs.append((p.name, self._load_yaml(p)))
        return docs

    def _entity_items(self, fname: str, ents: Any) -> Iterator[Tuple[str, Any]]:
        if isinstance(ents, dict):
            yield from ents.items()
        elif isinstance(ents, list):
            for item in ents:
                if not isinstance(item, dict):
                    raise ValueError(f"{fname}: entities list item must be a mapping, got {type(item).__name__}")
                if "name" in item and ("attributes" in item or "columns" in item):
                    yield item["name"], item
                else:
                    yield from item.items()
        else:
            raise ValueError(f"{fname}: entities must be a mapping or a list, got {type(ents).__name__}")

    def entities(self) -> Iterator[EntityDescriptor]:
        for fname, doc in self.docs:
            for name, spec in self._entity_items(fname, doc.get("entities") or {}):
                try:
                    yield EntityDescriptor.from_mapping(name, spec)
                except ValueError as e:
                    raise ValueError(f"{fname}: {e}") from e
