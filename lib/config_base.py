from __future__ import annotations

import ast
import json
import tomllib
from dataclasses import asdict, fields, is_dataclass
from pathlib import Path
from typing import Any, Mapping, TypeVar, get_type_hints

TConfig = TypeVar("TConfig", bound="ConfigBase")


class ConfigBase:
    """Mixin for dataclass configs readable from .toml / .json files."""

    @classmethod
    def from_file(cls: type[TConfig], config_path: str | Path) -> TConfig:
        path = Path(config_path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")
        if path.suffix == ".toml":
            data = tomllib.loads(path.read_text())
        elif path.suffix == ".json":
            data = json.loads(path.read_text())
        else:
            raise ValueError(
                f"Unsupported config format: {path.suffix}. Use .toml or .json."
            )
        if not isinstance(data, Mapping):
            raise ValueError("Config must parse to a mapping at the top level.")
        return cls.from_dict(data)

    @classmethod
    def from_dict(cls: type[TConfig], data: Mapping[str, Any]) -> TConfig:
        field_names = {f.name for f in fields(cls)}
        unknown = sorted(key for key in data if key not in field_names)
        if unknown:
            raise ValueError(f"Unknown config field(s): {', '.join(unknown)}")

        type_hints = get_type_hints(cls)
        kwargs: dict[str, Any] = {}
        for name, incoming in data.items():
            field_type = type_hints.get(name)
            if isinstance(field_type, type) and issubclass(field_type, ConfigBase):
                if not isinstance(incoming, Mapping):
                    raise ValueError(f"Expected mapping for nested config field `{name}`.")
                incoming = field_type.from_dict(incoming)
            kwargs[name] = incoming
        return cls(**kwargs)  # type: ignore[call-arg]

    def with_flat_updates(self: TConfig, overrides: Mapping[str, Any]) -> TConfig:
        """Return a copy with dotted keys (``logging.level``) replaced."""
        assert is_dataclass(self)
        merged = asdict(self)
        for dotted_key, value in overrides.items():
            parts = dotted_key.split(".")
            if any(not part for part in parts):
                raise ValueError(f"Invalid override key `{dotted_key}`.")
            cursor = merged
            for depth, part in enumerate(parts):
                if not isinstance(cursor, dict) or part not in cursor:
                    prefix = ".".join(parts[: depth + 1])
                    raise ValueError(f"Unknown config field `{prefix}`.")
                if depth == len(parts) - 1:
                    if isinstance(cursor[part], dict):
                        raise ValueError(
                            f"Cannot override nested config `{dotted_key}` with a scalar."
                        )
                    cursor[part] = value
                else:
                    cursor = cursor[part]
        return type(self).from_dict(merged)


def parse_value(raw: str) -> Any:
    """Best-effort literal parsing for command line values; falls back to the string."""
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        pass
    try:
        return ast.literal_eval(raw)
    except (ValueError, SyntaxError):
        return raw


def parse_overrides(expressions: list[str]) -> dict[str, Any]:
    overrides: dict[str, Any] = {}
    for expr in expressions:
        if "=" not in expr:
            raise ValueError(f"Invalid --set expression: `{expr}` (expected KEY=VALUE)")
        key, raw = expr.split("=", 1)
        overrides[key.strip()] = parse_value(raw)
    return overrides
