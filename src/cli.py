#!/usr/bin/env python3
"""AWS Sub-Resource Provider - Main Entry Point.

Applies the resources declared in a configuration file: ordered cache
behaviors and origins of existing CloudFront distributions, and Step
Functions executions.
"""

import sys
import argparse
import logging
from pathlib import Path
from typing import List, Optional

from src import __version__
from src.core.config import Configuration, ConfigurationError
from src.core.aws_client import AWSClientManager
from src.core.provider import Action, ChangeResult, Provider, ProviderError
from src.core.resource import ResourceValidationError
from src.core.state import StateError, StateStore


COMMANDS = ("apply", "refresh", "destroy", "validate")

ACTION_SYMBOLS = {
    Action.CREATE: "➕",
    Action.UPDATE: "✏️",
    Action.REPLACE: "♻️",
    Action.READ: "🔎",
    Action.DELETE: "🗑️",
}


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments.

    Returns:
        Parsed arguments namespace
    """
    parser = argparse.ArgumentParser(
        prog="aws-subresources",
        description="Manage CloudFront distribution sub-resources and Step Functions executions",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s apply                    # Auto-detect config.yaml and apply it
  %(prog)s apply config.yaml        # Use specific configuration file
  %(prog)s refresh                  # Re-read every resource in the state
  %(prog)s destroy                  # Remove every resource in the state
  %(prog)s validate                 # Check the configuration without calling AWS
        """,
    )

    parser.add_argument("command", choices=COMMANDS, help="Operation to run")

    parser.add_argument(
        "config_file",
        nargs="?",
        help="Path to configuration file (default: auto-detect config.yaml)",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"AWS Sub-Resource Provider v{__version__}",
    )

    parser.add_argument("--profile", help="AWS profile name to use for credentials")

    parser.add_argument(
        "--region", help="AWS region to use (overrides configuration file)"
    )

    parser.add_argument(
        "--state-file", help="Path to the state file (overrides configuration file)"
    )

    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Enable debug logging"
    )

    return parser.parse_args(argv)


def auto_detect_config() -> Optional[str]:
    """Auto-detect configuration file in current directory.

    Returns:
        Path to configuration file if found, None otherwise
    """
    if Path("config.yaml").exists():
        return "config.yaml"

    if Path("config/settings.yaml").exists():
        return "config/settings.yaml"

    return None


def display_results(results: List[ChangeResult]) -> None:
    """Print one line per resource instance."""
    if not results:
        print("Nothing to do.")
        return

    for result in results:
        symbol = ACTION_SYMBOLS.get(result.action, "❓")
        if result.action == Action.DELETE:
            print(f"{symbol} {result.address}: deleted")
        elif result.gone:
            print(f"⚠️  {result.address}: not found, removed from state")
        else:
            print(f"{symbol} {result.address}: {result.action.value} ({result.resource_id})")


def main(argv: Optional[List[str]] = None) -> int:
    """Main application entry point.

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    try:
        args = parse_arguments(argv)

        if args.verbose:
            logging.basicConfig(
                level=logging.DEBUG,
                format="%(asctime)s %(levelname)s %(name)s: %(message)s",
            )

        config_path = args.config_file or auto_detect_config()
        if not config_path:
            print("❌ No configuration file found.")
            print("   Please create config.yaml or specify a configuration file.")
            print("   Use --help for more information.")
            return 1

        print(f"📄 Using configuration file: {config_path}")

        try:
            config = Configuration(config_path)
        except ConfigurationError as e:
            print(f"❌ Configuration error: {e}")
            return 1

        region = args.region or config.get_region()

        if args.command == "validate":
            aws_client = AWSClientManager(region_name=region, validate=False)
            provider = Provider(aws_client, StateStore(args.state_file or config.get_state_file()))
            provider.validate(config.get_resources())
            print(f"✅ Configuration is valid ({len(config.get_resources())} resources)")
            return 0

        try:
            aws_client = AWSClientManager(
                profile_name=args.profile or config.get_profile_name(),
                region_name=region,
            )
        except Exception as e:
            print(f"❌ AWS client initialization failed: {e}")
            return 1

        state = StateStore(args.state_file or config.get_state_file())
        provider = Provider(aws_client, state, retry_timeout=config.get_retry_timeout())

        if args.command == "apply":
            results = provider.apply(config.get_resources())
        elif args.command == "refresh":
            results = provider.refresh()
        else:
            results = provider.destroy()

        display_results(results)
        print(f"✅ {args.command.capitalize()} complete")
        return 0

    except (ProviderError, ResourceValidationError) as e:
        print(f"❌ Invalid resource declaration: {e}")
        return 1

    except StateError as e:
        print(f"❌ State error: {e}")
        return 1

    except KeyboardInterrupt:
        print("\n\n👋 Operation cancelled by user.")
        return 130

    except Exception as e:
        print(f"\n❌ {args.command.capitalize()} failed: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
