"""Configuration loading and management."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from types import MappingProxyType
import tomllib

from .constants import (
    CONFIG_DOTFILE,
    CONFIG_TABLE,
    DEFAULT_CONTENTS_COLLECTION,
    DEFAULT_PAGES_COLLECTION,
    DEFAULT_TAB_STOP,
    DEFAULT_TAGS,
    TAB_ENTITY,
)
from .exceptions import ConfigError

EXPORT_TABLE = "export"


@dataclass(frozen=True)
class CreoleConfig:
    """Configuration for rendering Creole markup to HTML.

    Instances are immutable so one configuration can be shared by renders
    running concurrently.

    Attributes:
        tag_overrides: Replacement markup keyed by default opening tag, e.g.
            ``{"<TD>": '<TD class="cell">'}``. Keys are upper-cased.
        interwiki: URL prefix keyed by interwiki scheme, e.g.
            ``{"wikipedia": "https://en.wikipedia.org/wiki/"}``.
        tab_stop: Number of ``&nbsp;`` entities a tab expands to; 0 disables
            tab expansion.

    Examples:
        CreoleConfig(interwiki={"wiki": "https://wiki.example/"}, tab_stop=4)
    """

    tag_overrides: Mapping[str, str] = field(default_factory=dict)
    interwiki: Mapping[str, str] = field(default_factory=dict)
    tab_stop: int = DEFAULT_TAB_STOP

    def __post_init__(self):
        if isinstance(self.tag_overrides, Mapping):
            overrides = {
                key.upper() if isinstance(key, str) else key: value
                for key, value in self.tag_overrides.items()
            }
            object.__setattr__(self, "tag_overrides", MappingProxyType(overrides))
        if isinstance(self.interwiki, Mapping):
            object.__setattr__(self, "interwiki", MappingProxyType(dict(self.interwiki)))

    def start_tag(self, tag: str) -> str:
        """Return the markup configured for a default opening tag."""
        return self.tag_overrides.get(tag, tag)

    @property
    def tab_expansion(self) -> str:
        return TAB_ENTITY * self.tab_stop


@dataclass(frozen=True)
class ExportConfig:
    """Settings for the export pipeline.

    Attributes:
        connection: MongoDB connection string.
        database: Name of the database holding the wiki.
        output: Directory receiving the ``Creole`` and ``Html`` folders.
        pages_collection: Collection listing pages.
        contents_collection: Collection holding page bodies.
    """

    connection: str | None = None
    database: str | None = None
    output: str | None = None
    pages_collection: str = DEFAULT_PAGES_COLLECTION
    contents_collection: str = DEFAULT_CONTENTS_COLLECTION


_MISSING = object()


def load_config(search_path: Path) -> CreoleConfig:
    """Load render configuration from the nearest config file.

    Walks parent directories from `search_path` to the filesystem root, reading
    the ``[tool.creole-export]`` table from `pyproject.toml` and the
    ``[creole-export]`` or ``[tool.creole-export]`` table from
    `.creole-export.toml`. The ``export`` sub-table is ignored here; see
    `load_export_config`. Returns defaults when no configuration is found.

    Args:
        search_path: Directory used as the starting point for configuration lookup.

    Returns:
        CreoleConfig: Loaded configuration with defaults applied when necessary.

    Raises:
        ConfigError: If the table is present but not a mapping or contains
            unsupported keys.

    Examples:
        load_config(Path("docs"))
    """
    found = _find_table(search_path)
    if found is None:
        return CreoleConfig()
    raw_config, config_file, table_path = found
    raw_config = {key: value for key, value in raw_config.items() if key != EXPORT_TABLE}
    return _build(CreoleConfig, raw_config, config_file, table_path)


def load_export_config(search_path: Path) -> ExportConfig:
    """Load export settings from the ``export`` sub-table of the nearest config file.

    Raises:
        ConfigError: If the sub-table is not a mapping or contains unsupported keys.
    """
    found = _find_table(search_path)
    if found is None:
        return ExportConfig()
    raw_config, config_file, table_path = found
    raw_export = raw_config.get(EXPORT_TABLE)
    if raw_export is None:
        return ExportConfig()
    return _build(ExportConfig, raw_export, config_file, (*table_path, EXPORT_TABLE))


def _find_table(search_path: Path) -> tuple[dict, Path, tuple[str, ...]] | None:
    current = search_path.resolve()

    while True:
        candidates = (
            (current / "pyproject.toml", [("tool", CONFIG_TABLE)]),
            (current / CONFIG_DOTFILE, [(CONFIG_TABLE,), ("tool", CONFIG_TABLE)]),
        )
        for config_file, table_paths in candidates:
            found = _load_from_file(config_file, table_paths)
            if found is not None:
                return found

        parent = current.parent
        if parent == current:
            return None
        current = parent


def _load_from_file(
    config_file: Path, table_paths: list[tuple[str, ...]]
) -> tuple[dict, Path, tuple[str, ...]] | None:
    if not config_file.exists():
        return None

    try:
        with open(config_file, "rb") as stream:
            data = tomllib.load(stream)
    except (OSError, tomllib.TOMLDecodeError):
        return None

    for table_path in table_paths:
        raw_config = _extract_table(data, table_path)
        if raw_config is _MISSING:
            continue
        if not isinstance(raw_config, dict):
            raise ConfigError(f"Invalid `[{'.'.join(table_path)}]` settings in {config_file}")
        return raw_config, config_file, table_path

    return None


def _extract_table(data: object, table_path: tuple[str, ...]) -> object:
    current = data
    for key in table_path:
        if not isinstance(current, dict) or key not in current:
            return _MISSING
        current = current[key]
    return current


def _build(cls, raw_config: object, config_file: Path, table_path: tuple[str, ...]):
    table_display = ".".join(table_path)

    if not isinstance(raw_config, dict):
        raise ConfigError(f"Invalid `[{table_display}]` settings in {config_file}")

    known = {item.name for item in fields(cls)}
    unknown = sorted(set(raw_config) - known)
    if unknown:
        raise ConfigError(
            f"Invalid `[{table_display}]` settings in {config_file}: "
            f"unsupported keys {', '.join(unknown)}"
        )

    try:
        return cls(**raw_config)
    except TypeError as error:
        raise ConfigError(f"Invalid `[{table_display}]` settings in {config_file}") from error


def validate_config(config: CreoleConfig) -> None:
    """Validate a `CreoleConfig` instance.

    Args:
        config: Configuration to validate.

    Raises:
        ConfigError: If the tab stop is not a non-negative integer, a mapping
            holds non-string entries, a tag override names an unknown tag, or
            an interwiki scheme is empty or contains a colon.

    Examples:
        validate_config(CreoleConfig(tab_stop=4))
    """
    if isinstance(config.tab_stop, bool) or not isinstance(config.tab_stop, int):
        raise ConfigError("`tab_stop` must be an integer")
    if config.tab_stop < 0:
        raise ConfigError("`tab_stop` must be >= 0")

    _ensure_string_mapping("tag_overrides", config.tag_overrides)
    _ensure_string_mapping("interwiki", config.interwiki)

    unknown_tags = sorted(set(config.tag_overrides) - DEFAULT_TAGS)
    if unknown_tags:
        raise ConfigError(
            f"`tag_overrides` contains unknown tags: {', '.join(unknown_tags)}; "
            f"supported tags are: {', '.join(sorted(DEFAULT_TAGS))}"
        )

    for scheme in config.interwiki:
        if not scheme:
            raise ConfigError("`interwiki` scheme names must not be empty")
        if ":" in scheme:
            raise ConfigError(f"`interwiki` scheme {scheme!r} must not contain ':'")


def validate_export_config(config: ExportConfig, require_database: bool = True) -> None:
    """Validate export settings before a run.

    Args:
        config: Settings to validate.
        require_database: Whether connection and database settings are needed,
            which is the case unless documents come from a directory.

    Raises:
        ConfigError: If a required setting is missing or a collection name is empty.
    """
    required = ["output"]
    if require_database:
        required = ["connection", "database", "output"]
    for key in required:
        if not getattr(config, key):
            raise ConfigError(f"`{key}` must be set")
    if not config.pages_collection or not config.contents_collection:
        raise ConfigError("collection names must not be empty")


def apply_overrides(config, **overrides: object):
    """Apply override values to a configuration dataclass.

    Args:
        config: Base configuration to update.
        overrides: Override values keyed by field name; values set to None are
            ignored.

    Returns:
        New configuration with the overrides applied, or `config` itself when
        nothing changes.

    Raises:
        TypeError: If an override name is not a field of the configuration.

    Examples:
        updated = apply_overrides(config, tab_stop=4)
    """
    changes = {key: value for key, value in overrides.items() if value is not None}
    if not changes:
        return config
    return replace(config, **changes)


def build_config(search_path: Path, **overrides: object) -> CreoleConfig:
    """Load, override, and validate render configuration.

    Interwiki overrides are merged into the loaded mapping rather than
    replacing it.

    Raises:
        ConfigError: If configuration loading or validation fails.

    Examples:
        config = build_config(Path.cwd(), tab_stop=0)
    """
    config = load_config(search_path)
    interwiki = overrides.pop("interwiki", None)
    if interwiki:
        overrides["interwiki"] = {**config.interwiki, **interwiki}
    config = apply_overrides(config, **overrides)
    validate_config(config)
    return config


def parse_interwiki_option(values: tuple[str, ...] | list[str]) -> dict[str, str]:
    """Parse ``SCHEME=URL`` pairs given on the command line.

    Raises:
        ConfigError: If a value lacks the ``=`` separator or the scheme is empty.

    Examples:
        parse_interwiki_option(["wiki=https://wiki.example/"])
    """
    mapping: dict[str, str] = {}
    for value in values:
        scheme, separator, prefix = value.partition("=")
        if not separator or not scheme:
            raise ConfigError(f"Invalid interwiki mapping {value!r}; expected SCHEME=URL")
        mapping[scheme] = prefix
    return mapping


def _ensure_string_mapping(name: str, value: object) -> None:
    if not isinstance(value, Mapping):
        raise ConfigError(f"`{name}` must be a table of strings")
    for key, item in value.items():
        if not isinstance(key, str) or not isinstance(item, str):
            raise ConfigError(f"`{name}` must map strings to strings")
