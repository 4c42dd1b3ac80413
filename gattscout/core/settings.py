"""Loading and validation of YAML run settings."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import replace
from importlib import resources
from pathlib import Path
from typing import Any

import yaml
from jsonschema import ValidationError, validators

from gattscout.core.errors import SettingsLoadError, SettingsValidationError
from gattscout.core.model import AdapterConfig, MatchMode, RunSettings

LOGGER = logging.getLogger(__name__)

MAX_SCAN_TIMEOUT_S = 600.0


class UniqueKeyLoader(yaml.SafeLoader):
    """YAML loader that rejects duplicate mapping keys."""


def _construct_mapping(loader: UniqueKeyLoader, node: yaml.Node, deep: bool = False) -> dict[str, Any]:
    mapping: dict[str, Any] = {}
    for key_node, value_node in node.value:
        key = loader.construct_object(key_node, deep=deep)
        if key in mapping:
            raise SettingsValidationError(f"Duplicate key '{key}' in YAML document")
        mapping[key] = loader.construct_object(value_node, deep=deep)
    return mapping


UniqueKeyLoader.add_constructor(
    yaml.resolver.BaseResolver.DEFAULT_MAPPING_TAG,
    _construct_mapping,
)


def default_settings_path() -> Path:
    xdg_config = Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))
    return xdg_config / "gattscout/config.yaml"


def _load_schema_validator() -> Any:
    schema_text = resources.files("gattscout.schemas").joinpath("settings.schema.json").read_text(
        encoding="utf-8"
    )
    schema = json.loads(schema_text)
    validator_cls = validators.validator_for(schema)
    validator_cls.check_schema(schema)
    return validator_cls(schema)


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise SettingsLoadError(f"Could not read settings file {path}: {exc}") from exc

    try:
        loaded = yaml.load(content, Loader=UniqueKeyLoader)
    except yaml.YAMLError as exc:
        raise SettingsValidationError(f"Invalid YAML in {path}: {exc}") from exc

    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise SettingsValidationError(f"Settings file {path} must contain a mapping at root")
    return loaded


def build_settings(doc: dict[str, Any], source: Path | str = "<settings>") -> RunSettings:
    validator = _load_schema_validator()
    try:
        validator.validate(doc)
    except ValidationError as exc:
        path = ".".join(str(p) for p in exc.path)
        where = f" ({path})" if path else ""
        raise SettingsValidationError(f"Schema validation failed for {source}{where}: {exc.message}") from exc

    defaults = RunSettings()
    adapter_doc = doc.get("adapter", {})
    adapter = AdapterConfig(
        name=adapter_doc.get("name", defaults.adapter.name),
        scanning_mode=adapter_doc.get("scanning_mode", defaults.adapter.scanning_mode),
        use_bdaddr=adapter_doc.get("use_bdaddr", defaults.adapter.use_bdaddr),
        connect_timeout_s=float(
            adapter_doc.get("connect_timeout_s", defaults.adapter.connect_timeout_s)
        ),
    )
    return RunSettings(
        identifier=doc.get("identifier", defaults.identifier),
        scan_timeout_s=float(doc.get("scan_timeout_s", defaults.scan_timeout_s)),
        match_mode=MatchMode(doc.get("match", defaults.match_mode.value)),
        adapter=adapter,
    )


def load_settings(path: Path | None = None) -> RunSettings:
    """Load settings from `path`, or from the XDG config file when it exists.

    An explicit path must exist; the implicit XDG location is optional.
    """
    if path is None:
        path = default_settings_path()
        if not path.is_file():
            LOGGER.debug("No settings file at %s; using defaults", path)
            return RunSettings()
    settings = build_settings(_read_yaml(path), path)
    LOGGER.debug("Loaded settings from %s", path)
    return settings


def override_settings(
    settings: RunSettings,
    *,
    identifier: str | None = None,
    scan_timeout_s: float | None = None,
    match_mode: MatchMode | None = None,
    adapter_name: str | None = None,
) -> RunSettings:
    if identifier is not None:
        settings = replace(settings, identifier=identifier)
    if scan_timeout_s is not None:
        if not 0 < scan_timeout_s <= MAX_SCAN_TIMEOUT_S:
            raise SettingsValidationError(
                f"Scan timeout must be greater than zero and at most {MAX_SCAN_TIMEOUT_S:g} seconds"
            )
        settings = replace(settings, scan_timeout_s=scan_timeout_s)
    if match_mode is not None:
        settings = replace(settings, match_mode=match_mode)
    if adapter_name is not None:
        settings = replace(settings, adapter=replace(settings.adapter, name=adapter_name))
    return settings
