"""
Project root and effective configuration models.

A ProjectRoot is found once per run by walking up from the working
directory.  The EffectiveConfig is the merge of up to three YAML
documents (global → distributed → local) and is read-only afterwards.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

LayerName = Literal["global", "distributed", "local"]


class ProjectRoot(BaseModel):
    """The directory holding a dev-cli marker file."""

    model_config = ConfigDict(frozen=True)

    path: Path
    marker: Path  # the marker file that identified the root

    def __truediv__(self, other: str) -> Path:
        return self.path / other


class ConfigLayer(BaseModel):
    """One configuration source, as found on disk."""

    model_config = ConfigDict(frozen=True)

    name: LayerName
    path: Path
    loaded: bool = False
    values: dict[str, Any] = Field(default_factory=dict)


class EffectiveConfig(BaseModel):
    """Merged configuration; later layers win at the top-level key."""

    model_config = ConfigDict(frozen=True)

    values: dict[str, Any] = Field(default_factory=dict)
    layers: list[ConfigLayer] = Field(default_factory=list)

    def get(self, key: str, default: Any = None) -> Any:
        return self.values.get(key, default)

    def __contains__(self, key: object) -> bool:
        return key in self.values

    def source_of(self, key: str) -> LayerName | None:
        """Name of the layer that supplied ``key``, if any."""
        for layer in reversed(self.layers):
            if key in layer.values:
                return layer.name
        return None

    @property
    def loaded_layers(self) -> list[ConfigLayer]:
        return [layer for layer in self.layers if layer.loaded]
