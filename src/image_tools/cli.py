"""Command-line interface for the image tools."""

import argparse
import json
import logging
import sys
from typing import List, Optional

from . import __version__
from .config import ImageToolsConfig
from .server import ImageToolsServer
from .tools import TOOL_DEFINITIONS, ToolExecutor


def load_config(args) -> ImageToolsConfig:
    """Config file (if any), then IMAGE_TOOLS_* environment overrides."""
    base = ImageToolsConfig.from_file(args.config) if args.config else None
    config = ImageToolsConfig.from_env(base)
    if args.log_level:
        config.log_level = args.log_level
    config.validate()
    return config


def setup_logging(level_name: str) -> None:
    # stdout is reserved for tool output and protocol traffic
    logging.basicConfig(
        stream=sys.stderr,
        level=getattr(logging, level_name.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def cmd_serve(args) -> int:
    """Serve the tools over stdin/stdout."""
    try:
        config = load_config(args)
        setup_logging(config.log_level)
        logging.getLogger(__name__).info("image-tools %s serving on stdio", __version__)
        ImageToolsServer(config).run()
        return 0

    except KeyboardInterrupt:
        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def cmd_call(args) -> int:
    """Run a single tool and print its JSON result."""
    try:
        config = load_config(args)
        setup_logging(config.log_level)
        tool_args = json.loads(args.args) if args.args else {}
        if args.path:
            tool_args.setdefault("path", args.path)

        result = ToolExecutor(config).execute(args.tool, tool_args)
        print(json.dumps(result, indent=2))
        return 0

    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def cmd_list_tools(args) -> int:
    """List available tools."""
    for tool in TOOL_DEFINITIONS:
        function = tool["function"]
        required = ", ".join(function["parameters"]["required"])
        print(f"{function['name']:28s} ({required})")
        if args.verbose:
            print(f"    {function['description']}")
    return 0


def cmd_version(args) -> int:
    """Print the version."""
    print(f"image-tools {__version__}")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Image inspection and shape detection tools",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Serve tools to an MCP client over stdio
  image-tools serve

  # Detect lines with arrowheads
  image-tools call image_detect_lines --path diagram.png --args '{"detect_arrows": true}'

  # Narrow circle search with a config file
  image-tools call image_detect_circles --path dial.png --config tools.yaml

  # List tools
  image-tools list-tools -v
        """,
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    def add_config_args(sub):
        sub.add_argument("--config", help="Config file (YAML or JSON)")
        sub.add_argument("--log-level", help="Logging level (DEBUG, INFO, WARNING, ...)")

    # Serve command
    serve_parser = subparsers.add_parser("serve", help="Run the JSON-RPC server on stdio")
    add_config_args(serve_parser)
    serve_parser.set_defaults(func=cmd_serve)

    # Call command
    call_parser = subparsers.add_parser("call", help="Run one tool and print the result")
    call_parser.add_argument("tool", help="Tool name, e.g. image_detect_rectangles")
    call_parser.add_argument("--path", help="Image path (same as \"path\" in --args)")
    call_parser.add_argument("--args", help="Tool arguments as a JSON object")
    add_config_args(call_parser)
    call_parser.set_defaults(func=cmd_call)

    # List command
    list_parser = subparsers.add_parser("list-tools", help="List available tools")
    list_parser.add_argument("-v", "--verbose", action="store_true", help="Show descriptions")
    list_parser.set_defaults(func=cmd_list_tools)

    # Version command
    version_parser = subparsers.add_parser("version", help="Show version")
    version_parser.set_defaults(func=cmd_version)

    # Parse arguments
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    # Execute command
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
