"""Rule file loading and validation for monitor mode.

Rule files are JSON by default; ``.yml``/``.yaml`` files are read as YAML.
Both are checked against the packaged JSON schema before being turned into
:class:`LedRule` objects.
"""

from __future__ import annotations

import json
import logging
import os
from importlib import resources
from pathlib import Path
from typing import Any

import yaml
from jsonschema import ValidationError as SchemaValidationError
from jsonschema import validators

from legionkbl.core.errors import RuleLoadError, RuleParseError, ValidationError
from legionkbl.core.model import LedRule, LightingConfig, Matcher, WaveDirection

LOGGER = logging.getLogger(__name__)

RULES_ENV = "LEGIONKBL_RULES"
_YAML_SUFFIXES = {".yml", ".yaml"}


class UniqueKeyLoader(yaml.SafeLoader):
    """YAML loader that rejects duplicate mapping keys."""


UniqueKeyLoader.yaml_implicit_resolvers = {
    key: list(value) for key, value in yaml.SafeLoader.yaml_implicit_resolvers.items()
}

# gsettings prints values such as true/false/on/off; keep them as matchable strings.
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
            raise RuleParseError(f"Duplicate key '{key}' in YAML document")
        mapping[key] = loader.construct_object(value_node, deep=deep)
    return mapping


UniqueKeyLoader.add_constructor(
    yaml.resolver.BaseResolver.DEFAULT_MAPPING_TAG,
    _construct_mapping,
)


def _unique_json_object(pairs: list[tuple[str, Any]]) -> dict[str, Any]:
    mapping: dict[str, Any] = {}
    for key, value in pairs:
        if key in mapping:
            raise RuleParseError(f"Duplicate key '{key}' in JSON document")
        mapping[key] = value
    return mapping


def _load_schema_validator() -> Any:
    schema_text = resources.files("legionkbl.schemas").joinpath("rules.schema.json").read_text(
        encoding="utf-8"
    )
    schema = json.loads(schema_text)
    validator_cls = validators.validator_for(schema)
    validator_cls.check_schema(schema)
    return validator_cls(schema)


def default_rules_path() -> Path:
    override = os.environ.get(RULES_ENV)
    if override:
        return Path(override)
    xdg_config = Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))
    return xdg_config / "legionkbl/rules.json"


def _read_document(path: Path) -> Any:
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise RuleLoadError(f"Could not read rule file {path}: {exc}") from exc

    if path.suffix in _YAML_SUFFIXES:
        try:
            return yaml.load(content, Loader=UniqueKeyLoader)
        except yaml.YAMLError as exc:
            raise RuleParseError(f"Invalid YAML in {path}: {exc}") from exc

    try:
        return json.loads(content, object_pairs_hook=_unique_json_object)
    except json.JSONDecodeError as exc:
        raise RuleParseError(f"Invalid JSON in {path}: {exc}") from exc


def _build_config(doc: dict[str, Any], *, context: str) -> LightingConfig:
    try:
        return LightingConfig.build(
            doc["effect"],
            speed=doc.get("speed"),
            brightness=doc.get("brightness"),
            direction=WaveDirection.from_flags(doc.get("wave_direction", (0, 0))),
            colors=[tuple(color) for color in doc.get("colors", [])],
        )
    except ValidationError as exc:
        raise RuleParseError(f"{context}: {exc}") from exc


def _build_rule(doc: dict[str, Any], *, context: str) -> LedRule:
    matchers = []
    for position, (substring, config_doc) in enumerate(doc["parameters"]):
        config = _build_config(config_doc, context=f"{context}.parameters[{position}]")
        matchers.append(Matcher(substring=substring, config=config))
    return LedRule(domain=doc["domain"], key=doc["key"], matchers=tuple(matchers))


def parse_rules(doc: Any, *, source: str = "<rules>") -> list[LedRule]:
    """Validate an already-parsed rule document and build the rules it describes."""
    validator = _load_schema_validator()
    try:
        validator.validate(doc)
    except SchemaValidationError as exc:
        path = ".".join(str(p) for p in exc.path)
        where = f" ({path})" if path else ""
        raise RuleParseError(f"Schema validation failed for {source}{where}: {exc.message}") from exc

    rules = [_build_rule(rule_doc, context=f"{source}[{index}]") for index, rule_doc in enumerate(doc)]
    for rule in rules:
        if not rule.matchers:
            LOGGER.warning("Rule for %s has no parameters and will never match", rule.label)
    return rules


def load_rules(path: Path | str | None = None) -> list[LedRule]:
    rules_path = Path(path) if path is not None else default_rules_path()
    LOGGER.debug("Loading rules from %s", rules_path)
    return parse_rules(_read_document(rules_path), source=str(rules_path))
