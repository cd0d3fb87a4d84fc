"""Command-line interface for the Drayage Rules Engine."""

import argparse
import json
import sys
from pathlib import Path
from typing import List, Optional

project_dir = Path(__file__).parent
sys.path.insert(0, str(project_dir))

from src.config.env_loader import load_environment_variables
from src.config.logging_config import setup_logging
from src.config.settings import get_settings
from src.core.calculator import ChargeCalculator
from src.core.exceptions import RulesEngineError
from src.core.rules_loader import RuleLoader
from src.core.validators import validate_container_number
from src.models.schema import ActivityType, ContainerSize


class RulesCommandLine:
    """Wires settings, rules and calculator together for the CLI commands.

    The rules are loaded lazily so that ``validate-container`` works even when
    the configured rules file is broken.
    """

    def __init__(self, rules_file: Optional[Path] = None):
        self.rules_file = rules_file
        self._calculator = None

    @property
    def calculator(self) -> ChargeCalculator:
        if self._calculator is None:
            if self.rules_file is not None:
                rules = RuleLoader.load_from_json(self.rules_file)
            else:
                rules = RuleLoader.load_default(get_settings())
            self._calculator = ChargeCalculator(rules)
        return self._calculator

    def validate_container(self, args: argparse.Namespace) -> dict:
        result = validate_container_number(args.container_number)
        return {
            "container_number": args.container_number,
            "valid": result.ok,
            "errors": [error.to_dict() for error in result.errors],
        }

    def per_diem(self, args: argparse.Namespace) -> dict:
        return self.calculator.per_diem(ContainerSize(args.size), args.days).to_dict()

    def demurrage(self, args: argparse.Namespace) -> dict:
        return self.calculator.demurrage(ContainerSize(args.size), args.days).to_dict()

    def detention(self, args: argparse.Namespace) -> dict:
        activity = ActivityType(args.activity) if args.activity else None
        return self.calculator.detention(
            args.minutes, activity=activity, free_minutes_override=args.free_minutes
        ).to_dict()


def build_parser() -> argparse.ArgumentParser:
    sizes = [size.value for size in ContainerSize]

    parser = argparse.ArgumentParser(
        prog="drayage-rules",
        description="Drayage charge calculation and container validation",
    )
    parser.add_argument("--rules-file", type=Path, help="BusinessRules JSON file (overrides settings)")
    parser.add_argument("--log-level", help="Logging level (defaults to LOG_LEVEL / settings)")
    subparsers = parser.add_subparsers(dest="command", required=True)

    validate = subparsers.add_parser("validate-container", help="Validate an ISO 6346 container number")
    validate.add_argument("container_number")

    per_diem = subparsers.add_parser("per-diem", help="Per-diem for days out")
    per_diem.add_argument("size", choices=sizes)
    per_diem.add_argument("days", type=int)

    demurrage = subparsers.add_parser("demurrage", help="Demurrage for days past the last free day")
    demurrage.add_argument("size", choices=sizes)
    demurrage.add_argument("days", type=int)

    detention = subparsers.add_parser("detention", help="Detention for one day of dwell")
    detention.add_argument("minutes", type=int)
    detention.add_argument("--activity", choices=[activity.value for activity in ActivityType])
    detention.add_argument("--free-minutes", type=int, default=0, help="Free time override in minutes")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point for the ``drayage-rules`` console script."""
    load_environment_variables(project_dir)
    args = build_parser().parse_args(argv)

    settings = get_settings()
    setup_logging(level=args.log_level or settings.log_level, log_file=settings.log_file)

    cli = RulesCommandLine(rules_file=args.rules_file)
    handlers = {
        "validate-container": cli.validate_container,
        "per-diem": cli.per_diem,
        "demurrage": cli.demurrage,
        "detention": cli.detention,
    }

    try:
        output = handlers[args.command](args)
    except (RulesEngineError, FileNotFoundError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    print(json.dumps(output, indent=2, default=str))
    if args.command == "validate-container" and not output["valid"]:
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
