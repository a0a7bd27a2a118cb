from __future__ import annotations
from pathlib import Path
from typing import List, Optional

import yaml
from pydantic import BaseModel, Field

from .ir import RegistrySnapshot

ASSET_FACTORY_PID = "org.eclipse.kura.wire.WireAsset"

class Settings(BaseModel):
    # Factories whose instances must be bound to a driver.
    driver_factories: List[str] = Field(default_factory=lambda: [ASSET_FACTORY_PID])
    log_level: str = "INFO"

def load_settings(path: Optional[Path] = None) -> Settings:
    if path is None or not path.exists():
        return Settings()
    data = yaml.safe_load(path.read_text()) or {}
    return Settings(**data)

def load_snapshot(path: Path) -> RegistrySnapshot:
    """Read the registry snapshot an editing session starts from (YAML or JSON)."""
    data = yaml.safe_load(path.read_text()) or {}
    return RegistrySnapshot(**data)
