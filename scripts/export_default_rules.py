"""Script to write the effective business rules to disk as JSON.

The output is a starting point for a customized ``business_rules.json``;
edit it and point BUSINESS_RULES_JSON at it.
"""

import argparse
import sys
from pathlib import Path

# Add project root to path (scripts/ -> project root)
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from src.config.env_loader import load_environment_variables
from src.config.settings import get_settings
from src.core.rules_loader import RuleLoader


def main():
    """Build rules from settings and save them."""
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument(
        "--output", type=Path, default=None,
        help="Output path (defaults to the configured business rules path)",
    )
    parser.add_argument("--force", action="store_true", help="Overwrite an existing file")
    args = parser.parse_args()

    load_environment_variables(project_root)
    settings = get_settings()
    output_path = args.output or RuleLoader.get_default_path(settings)

    if output_path.exists() and not args.force:
        print(f"Error: {output_path} already exists (use --force to overwrite)")
        return 1

    rules = RuleLoader.from_settings(settings)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(rules.model_dump_json(indent=2), encoding="utf-8")

    print(f"Business rules version {rules.version} saved to: {output_path}")
    print("Load them with RuleLoader.load_from_json() or by setting BUSINESS_RULES_JSON.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
