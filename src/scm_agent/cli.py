#!/usr/bin/env python3
"""
scm-agent CLI entry point.

Usage examples:
  - Show help:
      scm-agent --help

  - Play a game on the built-in market:
      scm-agent run --days 60 --seed 7

  - Use a settings overlay and a custom scenario, print JSON:
      scm-agent run --config settings.yaml --scenario market.yaml --json

  - Print the resolved settings:
      scm-agent config
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from typing import Any, Dict, Optional

import yaml
from pydantic import ValidationError

from scm_agent.config import AgentSettings, load_settings
from scm_agent.exceptions import ConfigurationError
from scm_agent.logging import configure_logging
from scm_agent.simulation import MarketSimulation

LOG = logging.getLogger("scm_agent.cli")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="scm-agent",
        description=__doc__,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    config_help = "YAML settings overlay (defaults to $SCM_AGENT_CONFIG_PATH)."
    parser.add_argument("--config", default=None, help=config_help)
    subparsers = parser.add_subparsers(dest="command")

    p_run = subparsers.add_parser("run", help="Run the agent through a simulated market.")
    p_run.add_argument("--config", default=argparse.SUPPRESS, help=config_help)
    p_run.add_argument("--days", type=int, default=None, help="Number of simulated days.")
    p_run.add_argument("--seed", type=int, default=None, help="Random seed for a reproducible run.")
    p_run.add_argument("--scenario", default=None, help="Scenario YAML with products and components.")
    p_run.add_argument("--json", action="store_true", help="Print statistics as JSON.")

    p_config = subparsers.add_parser("config", help="Print the resolved settings as YAML.")
    # accepted after the subcommand too; SUPPRESS keeps a top-level value
    p_config.add_argument("--config", default=argparse.SUPPRESS, help=config_help)
    return parser


def _apply_overrides(settings: AgentSettings, args: argparse.Namespace) -> AgentSettings:
    updates: Dict[str, Any] = {}
    if getattr(args, "days", None) is not None:
        updates["days"] = args.days
    if getattr(args, "seed", None) is not None:
        updates["seed"] = args.seed
    if getattr(args, "scenario", None):
        updates["scenario_path"] = args.scenario
    if not updates:
        return settings
    data = settings.model_dump(by_alias=True)
    data["simulation"].update(updates)
    try:
        return AgentSettings.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(
            "invalid command-line override", errors=e.errors(include_url=False)
        ) from e


def handle_run(settings: AgentSettings, as_json: bool) -> int:
    simulation = MarketSimulation(settings)
    stats = asyncio.run(simulation.run())
    if as_json:
        print(json.dumps(stats, indent=2, sort_keys=True))
        return 0

    print(f"Days played:       {stats['days']}")
    print(f"Customer RFQs:     {stats['customer_rfqs']}  (bids: {stats['bids']})")
    print(f"Orders:            {stats['orders']}")
    print(f"Delivered:         {stats['delivered']}  (late: {stats['late_deliveries']})")
    print(f"Canceled:          {stats['canceled']}")
    print(f"Revenue:           {stats['revenue']}")
    print(f"Component cost:    {stats['component_cost']}")
    print(f"Penalties:         {stats['penalties']:.2f}")
    print(f"Profit:            {stats['profit']:.2f}")
    return 0


def handle_config(settings: AgentSettings) -> int:
    print(yaml.safe_dump(settings.model_dump(mode="json", by_alias=True), sort_keys=False))
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    """
    Entry point for the CLI.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = _apply_overrides(load_settings(args.config), args)
    except ConfigurationError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2

    configure_logging(settings, force=True)

    if args.command == "run":
        LOG.info("Starting simulation for %d days", settings.simulation.days)
        try:
            return handle_run(settings, as_json=args.json)
        except ConfigurationError as e:
            LOG.error("Cannot run simulation: %s", e)
            return 2
    if args.command == "config":
        return handle_config(settings)

    parser.print_help(sys.stderr)
    return 1


if __name__ == "__main__":
    sys.exit(main())
