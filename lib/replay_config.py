from __future__ import annotations

import argparse
import logging
from dataclasses import dataclass, field

from lib.config_base import ConfigBase, parse_overrides


@dataclass
class LoggingConfig(ConfigBase):
    level: str = "WARNING"
    format: str = "%(levelname)s %(name)s: %(message)s"

    def apply(self) -> None:
        level = logging.getLevelName(self.level.upper())
        if not isinstance(level, int):
            raise ValueError(f"Unsupported log level `{self.level}`.")
        logging.basicConfig(level=level, format=self.format, force=True)


@dataclass
class ReplayConfig(ConfigBase):
    ops_path: str | None = None
    # Validate the whole heap after every mutation
    check_invariants: bool = False
    show_status: bool = True
    progress: bool = True
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Replay an operation script against an updatable heap."
    )
    parser.add_argument(
        "--config", type=str, default=None, help="Path to .toml or .json config."
    )
    parser.add_argument(
        "--ops", type=str, default=None, help="Operation script (.txt, .json or .yaml)."
    )
    parser.add_argument(
        "--set",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Override config key(s), e.g. --set check_invariants=true --set logging.level=DEBUG",
    )
    parser.add_argument(
        "--print-config", action="store_true", help="Print final config and exit."
    )
    return parser.parse_args(argv)


def load_replay_config(args: argparse.Namespace) -> ReplayConfig:
    cfg = ReplayConfig.from_file(args.config) if args.config else ReplayConfig()
    overrides = parse_overrides(args.set)
    if args.ops is not None:
        overrides["ops_path"] = args.ops
    if overrides:
        cfg = cfg.with_flat_updates(overrides)
    return cfg
