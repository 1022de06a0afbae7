#!/usr/bin/env python3
"""Resolve deployment modules against parameter overrides and print the plan."""
from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from stake_deployments.descriptors import ModuleDescriptor
from stake_deployments.errors import DescriptorError, DuplicateModuleNameError, ParameterFileError
from stake_deployments.modules import default_modules, get_module
from stake_deployments.parameters import (
    Settings,
    load_parameters_file,
    load_settings,
    merge_parameters,
    parse_assignment,
)
from stake_deployments.resolver import DeploymentPlan, resolve_all
from stake_deployments.transactions import build_deployment_transaction, find_artifact


def _build_parser(settings: Settings) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "modules",
        nargs="*",
        help="Module names to resolve. Defaults to every built-in module.",
    )
    parser.add_argument(
        "--parameters",
        type=Path,
        default=settings.parameters_file,
        help="Ignition-style parameters JSON (defaults to $DEPLOY_PARAMETERS_FILE).",
    )
    parser.add_argument(
        "--param",
        action="append",
        dest="assignments",
        default=[],
        metavar="MODULE.NAME=VALUE",
        help="Override a single parameter. Repeat for several; wins over --parameters.",
    )
    parser.add_argument(
        "--modules-file",
        type=Path,
        default=None,
        help="JSON list of module descriptors to use instead of the built-in modules.",
    )
    parser.add_argument(
        "--artifacts",
        type=Path,
        default=settings.artifacts_dir,
        help="Hardhat artifacts directory; when set, unsigned transactions are included.",
    )
    parser.add_argument("--json", action="store_true", help="Emit the plan as JSON.")
    parser.add_argument(
        "--log-level",
        type=str,
        default="WARNING",
        help="Logging verbosity (DEBUG, INFO, WARNING)",
    )
    return parser


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(asctime)s | %(levelname)s | %(message)s",
    )


def _load_modules_file(path: Path) -> List[ModuleDescriptor]:
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise ParameterFileError(f"Unable to read modules file {path}: {exc}") from exc
    if not isinstance(payload, list):
        raise ParameterFileError(f"{path}: expected a list of module descriptors")
    try:
        return [ModuleDescriptor.from_dict(entry) for entry in payload]
    except (KeyError, TypeError) as exc:
        raise ParameterFileError(f"{path}: invalid module descriptor: {exc}") from exc


def _select_modules(args: argparse.Namespace) -> List[ModuleDescriptor]:
    available = _load_modules_file(args.modules_file) if args.modules_file else default_modules()
    if not args.modules:
        return available
    by_name = {module.name: module for module in available}
    selected = []
    for name in args.modules:
        if name in by_name:
            selected.append(by_name[name])
        elif args.modules_file:
            raise KeyError(f"Unknown module {name!r} in {args.modules_file}")
        else:
            selected.append(get_module(name))
    return selected


def _attach_transactions(plan: DeploymentPlan, artifacts_dir: Path) -> Dict[str, Any]:
    document = plan.as_dict()
    for entry, resolved in zip(document["deployments"], plan.ordered()):
        try:
            artifact = find_artifact(artifacts_dir, resolved.contract_name)
            entry["transaction"] = build_deployment_transaction(resolved, artifact)
        except DescriptorError as exc:
            logging.error("%s: %s", resolved.future_id, exc)
            entry["transaction_error"] = str(exc)
            document["ok"] = False
    return document


def _format_plan(document: Dict[str, Any]) -> str:
    lines = [f"\nResolved {len(document['deployments'])} deployment(s):\n"]
    for entry in document["deployments"]:
        lines.append(f"Module:    {entry['module']}")
        lines.append(f"Contract:  {entry['contract']}")
        args = ", ".join(str(arg) for arg in entry["constructor_args"]) or "(none)"
        lines.append(f"Args:      {args}")
        if "value" in entry:
            lines.append(f"Value:     {entry['value']} wei")
        if "transaction_error" in entry:
            lines.append(f"Tx error:  {entry['transaction_error']}")
        lines.append("-" * 60)
    for name, failure in document["failures"].items():
        lines.append(f"FAILED {name}: {failure['message']}")
    return "\n".join(lines)


def main(argv: Optional[Sequence[str]] = None) -> int:
    settings = load_settings()
    parser = _build_parser(settings)
    args = parser.parse_args(argv)
    configure_logging(args.log_level)

    try:
        file_parameters = load_parameters_file(args.parameters) if args.parameters else {}
        cli_parameters: Dict[str, Dict[str, Any]] = {}
        for assignment in args.assignments:
            module_name, name, value = parse_assignment(assignment)
            cli_parameters.setdefault(module_name, {})[name] = value
        modules = _select_modules(args)
        plan = resolve_all(modules, merge_parameters(file_parameters, cli_parameters))
    except (KeyError, ParameterFileError, DuplicateModuleNameError) as exc:
        message = exc.args[0] if isinstance(exc, KeyError) and exc.args else exc
        print(f"error: {message}", file=sys.stderr)
        return 2

    if args.artifacts:
        document = _attach_transactions(plan, args.artifacts)
    else:
        document = plan.as_dict()

    if args.json:
        json.dump(document, sys.stdout, indent=2)
        sys.stdout.write("\n")
    else:
        print(_format_plan(document))
    return 0 if document["ok"] else 1


if __name__ == "__main__":
    raise SystemExit(main())
