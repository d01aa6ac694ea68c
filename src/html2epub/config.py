"""Build a ConversionRequest from a JSON config file and command-line values."""

import json
import logging
import re
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from html2epub.core.document_source import check_spine, expand_sources
from html2epub.errors import ConfigError
from html2epub.models.request import ConversionRequest

log = logging.getLogger(__name__)

DC_KEY_PATTERN = re.compile(r"^[A-Za-z][\w.-]*$")


def load_config_file(path: Path) -> dict[str, Any]:
    """Read a JSON configuration file."""
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ConfigError(f"Cannot read config file {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid JSON in {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a JSON object")
    return _normalize_keys(data)


def _normalize_keys(params: dict[str, Any]) -> dict[str, Any]:
    """Map aliases (keepAllHeadings, outputFile...) to field names."""
    aliases = {
        info.alias: name
        for name, info in ConversionRequest.model_fields.items()
        if info.alias
    }
    return {aliases.get(key, key): value for key, value in params.items()}


def parse_dc_options(options: list[str]) -> dict[str, str]:
    """Parse ["creator=Lewis Carroll", "dc:publisher=..."] into a dict."""
    dc: dict[str, str] = {}
    for option in options:
        key, sep, value = option.partition("=")
        key = key.strip().removeprefix("dc:")
        if not sep or not DC_KEY_PATTERN.match(key):
            raise ConfigError(f"Invalid Dublin Core option: {option!r} (expected key=value)")
        dc[key] = value
    return dc


def load_request(
    config_path: Path | None = None,
    sources: list[str] | None = None,
    dc_options: list[str] | None = None,
    **overrides: Any,
) -> ConversionRequest:
    """Merge config file, sources and command-line overrides into a request.

    Command-line values override the config file; ``None`` means "not
    given". Without any source or spine, the base directory is scanned for
    markup documents when the conversion runs.

    Raises:
        ConfigError: unreadable config, invalid values or bad sources
    """
    params: dict[str, Any] = {}
    if config_path is not None:
        params = load_config_file(config_path)
        params.setdefault("output_file", Path(f"{config_path.stem}.epub"))

    params.update({key: value for key, value in overrides.items() if value is not None})

    if dc_options:
        params["dc"] = {**params.get("dc", {}), **parse_dc_options(dc_options)}

    if sources:
        basedir = params.get("basedir")
        basedir, spine = expand_sources(sources, Path(basedir) if basedir else None)
        if not spine:
            raise ConfigError("No documents found")
        params["basedir"] = basedir
        params["spine"] = spine
    else:
        check_spine(params.get("spine") or [])

    try:
        request = ConversionRequest.model_validate(params)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration:\n{e}") from e

    for key in request.dc:
        if not DC_KEY_PATTERN.match(key):
            raise ConfigError(f"Invalid Dublin Core element name: {key!r}")

    log.debug("Conversion request: %s", request.model_dump_json(exclude={"identifier"}))
    return request
