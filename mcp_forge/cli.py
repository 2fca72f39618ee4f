#!/usr/bin/env python3
"""
mcp-forge CLI Entry Point

Commands:
- serve: run the project's components as an MCP stdio server
- check: load every component and report what loaded and what failed
- clean: remove the project's staging directory
"""

import argparse
import asyncio
import shutil
import sys
from pathlib import Path

from mcp_forge import __version__, __package_name__
from mcp_forge.components import ComponentLoader
from mcp_forge.config import ConfigError, ConfigManager
from mcp_forge.registry import ComponentRegistry
from mcp_forge.utils import Logger


def print_version():
    """Print version info."""
    print(f"{__package_name__} v{__version__}")


async def run_stdio(project_root: Path | None):
    """Run in stdio mode (for MCP clients)."""
    from mcp_forge.server import ForgeMCPServer
    server = ForgeMCPServer(project_root)
    await server.start()


async def check(project_root: Path | None) -> int:
    """Load all components once; exit status 1 if any failed."""
    config = await ConfigManager(project_root).load()
    Logger(level=config.log_level)

    registry = ComponentRegistry(
        ComponentLoader.create(config.project_root, config.staging_root, cache_policy=config.cache_policy)
    )
    report = await registry.load_all(config.autoload)
    stats = registry.stats

    print(f"Project: {config.project_root}")
    print(f"  tools:     {stats.tools}")
    print(f"  resources: {stats.resources}")
    print(f"  prompts:   {stats.prompts}")
    print(f"  total:     {stats.total}")

    if report.errors:
        print(f"\n{len(report.errors)} error(s):")
        for error in report.errors:
            print(f"  ✗ {error}")
        return 1

    print("\n✓ All components loaded")
    return 0


async def clean(project_root: Path | None) -> int:
    """Remove the staging directory of the project."""
    config = await ConfigManager(project_root).load()
    staging_root = config.staging_root
    if staging_root.exists():
        shutil.rmtree(staging_root)
        print(f"✓ Removed {staging_root}")
    else:
        print(f"Nothing to clean at {staging_root}")
    return 0


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="mcp-forge",
        description="Serve a project's MCP tools, resources and prompts",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""\
Examples:
  mcp-forge serve                  Run the stdio server for the current directory
  mcp-forge check --project ./app  Load ./app's components and report errors
  mcp-forge clean                  Drop cached compiled components

MCP Configuration:

  {
    "mcpServers": {
      "my-project": {
        "command": "mcp-forge",
        "args": ["serve", "--project", "/path/to/project"]
      }
    }
  }
"""
    )

    parser.add_argument(
        "--version", "-v",
        action="store_true",
        help="Show version and exit"
    )

    subparsers = parser.add_subparsers(dest="command")
    for name, help_text in (
        ("serve", "Run the MCP server over stdio (default)"),
        ("check", "Load all components and report errors"),
        ("clean", "Remove the project's staging directory"),
    ):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument(
            "--project", "-p",
            type=Path,
            default=None,
            help="Project root (default: MCP_FORGE_PROJECT_ROOT or the current directory)"
        )

    args = parser.parse_args(argv)

    if args.version:
        print_version()
        sys.exit(0)

    command = args.command or "serve"
    project_root = getattr(args, "project", None)

    try:
        if command == "check":
            sys.exit(asyncio.run(check(project_root)))
        elif command == "clean":
            sys.exit(asyncio.run(clean(project_root)))
        else:
            asyncio.run(run_stdio(project_root))
    except ConfigError as e:
        print(f"✗ {e}", file=sys.stderr)
        sys.exit(2)


if __name__ == "__main__":
    main()
