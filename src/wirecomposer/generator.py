from importlib.resources import files
from pathlib import Path
from typing import Dict
import yaml
from .ir import RegistrySnapshot, SaveTransaction

def available_templates() -> Dict[str, str]:
    """Bundled snapshot templates, keyed by CLI name (``asset_store.yaml`` -> ``asset-store``)."""
    bundled = files('wirecomposer.templates')
    return {entry.name[:-len(".yaml")].replace('_', '-'): entry.name
            for entry in bundled.iterdir() if entry.name.endswith(".yaml")}

def generate_snapshot_from_template(template: str) -> RegistrySnapshot:
    known = available_templates()
    filename = known.get(template.lower())
    if filename is None:
        raise ValueError(f"Unknown template '{template}'. Use one of: {', '.join(sorted(known))}")
    text = (files('wirecomposer.templates') / filename).read_text()
    return RegistrySnapshot(**yaml.safe_load(text))

def save_snapshot_yaml(snapshot: RegistrySnapshot, path: Path):
    # Enums and nested records as plain YAML scalars, field order as declared.
    path.write_text(yaml.safe_dump(snapshot.model_dump(mode="json"), sort_keys=False))

def load_transaction_yaml(path: Path) -> SaveTransaction:
    """Read back a transaction a FileRegistry wrote."""
    return SaveTransaction(**(yaml.safe_load(path.read_text()) or {}))
