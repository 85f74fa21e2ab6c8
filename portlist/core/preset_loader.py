"""Preset loading and validation for YAML-based portlist filter presets."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from importlib import resources
from importlib.resources.abc import Traversable
from pathlib import Path
from typing import Any

import yaml
from jsonschema import ValidationError, validators

from portlist.core.errors import FilterSyntaxError, PresetLoadError, PresetValidationError
from portlist.core.filter_args import parse_filter_token
from portlist.core.model import Preset

LOGGER = logging.getLogger(__name__)


class UniqueKeyLoader(yaml.SafeLoader):
    """YAML loader that rejects duplicate mapping keys."""


UniqueKeyLoader.yaml_implicit_resolvers = {
    key: list(value) for key, value in yaml.SafeLoader.yaml_implicit_resolvers.items()
}

for first_char, mappings in list(UniqueKeyLoader.yaml_implicit_resolvers.items()):
    UniqueKeyLoader.yaml_implicit_resolvers[first_char] = [
        (tag, regexp)
        for tag, regexp in mappings
        if tag != "tag:yaml.org,2002:bool"
    ]


def _construct_mapping(loader: UniqueKeyLoader, node: yaml.Node, deep: bool = False) -> dict[str, Any]:
    mapping: dict[str, Any] = {}
    for key_node, value_node in node.value:
        key = loader.construct_object(key_node, deep=deep)
        if key in mapping:
            raise PresetValidationError(f"Duplicate key '{key}' in YAML document")
        mapping[key] = loader.construct_object(value_node, deep=deep)
    return mapping


UniqueKeyLoader.add_constructor(
    yaml.resolver.BaseResolver.DEFAULT_MAPPING_TAG,
    _construct_mapping,
)


@dataclass(frozen=True)
class LoadedPresets:
    presets: dict[str, Preset]
    warnings: tuple[str, ...]


def _load_schema_validator() -> Any:
    schema_text = resources.files("portlist.schemas").joinpath("preset.schema.json").read_text(
        encoding="utf-8"
    )
    schema = json.loads(schema_text)
    validator_cls = validators.validator_for(schema)
    validator_cls.check_schema(schema)
    return validator_cls(schema)


def _preset_dirs() -> tuple[Path, Path]:
    xdg_config = Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))
    xdg_data = Path(os.environ.get("XDG_DATA_HOME", Path.home() / ".local/share"))
    return xdg_config / "portlist/presets", xdg_data / "portlist/presets"


def _read_yaml(path: Path | Traversable) -> dict[str, Any]:
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise PresetLoadError(f"Could not read preset file {path}: {exc}") from exc

    try:
        loaded = yaml.load(content, Loader=UniqueKeyLoader)
    except yaml.YAMLError as exc:
        raise PresetValidationError(f"Invalid YAML in {path}: {exc}") from exc

    if not isinstance(loaded, dict):
        raise PresetValidationError(f"Preset file {path} must contain a mapping at root")
    return loaded


def _build_preset(doc: dict[str, Any], source: Path | Traversable, validator: Any) -> Preset:
    try:
        validator.validate(doc)
    except ValidationError as exc:
        path = ".".join(str(p) for p in exc.path)
        where = f" ({path})" if path else ""
        raise PresetValidationError(f"Schema validation failed for {source}{where}: {exc.message}") from exc

    tokens = tuple(token.strip() for token in doc["match"])
    try:
        rules = tuple(parse_filter_token(token) for token in tokens)
    except FilterSyntaxError as exc:
        raise PresetValidationError(f"Preset '{doc['id']}' in {source}: {exc}") from exc

    return Preset(
        id=doc["id"],
        name=doc["name"],
        rules=rules,
        tokens=tokens,
        description=doc.get("description"),
    )


def _iter_packaged_preset_paths() -> list[Traversable]:
    preset_root = resources.files("portlist.presets")
    return [item for item in preset_root.iterdir() if item.name.endswith((".yml", ".yaml"))]


def _iter_user_preset_paths() -> list[Path]:
    paths: list[Path] = []
    for directory in _preset_dirs():
        if not directory.exists() or not directory.is_dir():
            continue
        paths.extend(sorted(p for p in directory.iterdir() if p.suffix in {".yml", ".yaml"}))
    return paths


def load_presets() -> LoadedPresets:
    presets: dict[str, Preset] = {}
    warnings: list[str] = []
    validator = _load_schema_validator()

    for path in sorted(_iter_packaged_preset_paths(), key=lambda p: p.name):
        preset = _build_preset(_read_yaml(path), path, validator)
        presets[preset.id] = preset

    packaged = set(presets)
    for path in _iter_user_preset_paths():
        preset = _build_preset(_read_yaml(path), path, validator)
        if preset.id in packaged:
            warning = f"User preset '{preset.id}' overrides packaged preset"
            LOGGER.warning(warning)
            warnings.append(warning)
        presets[preset.id] = preset

    LOGGER.debug("Loaded %d filter presets", len(presets))
    return LoadedPresets(presets=presets, warnings=tuple(warnings))
