#!/usr/bin/env python3
"""
Redis Lua Loader CLI Entry Point

Handles:
- Listing the scripts a directory set holds and the names they resolve to
- Loading scripts into Redis and printing their SHAs
- Calling a single script
- SCRIPT KILL
"""

import argparse
import asyncio
import sys
from pathlib import Path
from typing import List

from redis_lua_loader import __version__, __package_name__
from redis_lua_loader.config import ConfigManager, LoaderConfig
from redis_lua_loader.errors import LuaLoaderError
from redis_lua_loader.loader import LuaLoader
from redis_lua_loader.scripts.finder import ScriptFile, ScriptFinder
from redis_lua_loader.utils import Logger
from redis_lua_loader.utils.naming import camel_case


def build_config(args) -> LoaderConfig:
    """Environment config with command-line overrides applied."""
    config = ConfigManager.get_instance().load()
    dirs = list(getattr(args, "dirs", None) or []) + list(args.src or [])
    if dirs:
        config.src = [Path(p) for p in dirs]
    if args.redis_url:
        config.redis_url = args.redis_url
    if args.direct:
        config.preload = False
    if args.namespace:
        config.namespace = True
    return config


async def list_scripts(config: LoaderConfig) -> int:
    """Print every script file and the name it will be exposed under."""
    found: List[ScriptFile] = []
    errors: List[Exception] = []

    async def collect(script: ScriptFile) -> None:
        found.append(script)

    # same walk as loading, so the listing matches what `load` would register
    await ScriptFinder(config.extension).scan(config.src, collect, errors.append)

    for script in sorted(found, key=lambda s: s.path):
        name = camel_case(script.relative_name if config.namespace else script.base_name)
        print(f"{name:<30} {script.path}")
    if not found:
        print("No scripts found")
    for error in errors:
        print(f"  ⚠ {error}", file=sys.stderr)
    return 1 if errors else 0


async def load_scripts(config: LoaderConfig, logger: Logger) -> int:
    """Load every script and print name + SHA."""
    errors: List[Exception] = []
    loader = LuaLoader(config=config, logger=logger)
    loader.on_error(errors.append)
    try:
        await loader.start()
    finally:
        await loader.close()

    for entry in sorted(loader.entries(), key=lambda e: e.name):
        print(f"{entry.name:<30} {entry.sha or '-':<42} {entry.status.value}")
    for error in errors:
        print(f"  ⚠ {error}", file=sys.stderr)

    if not loader.is_ready:
        logger.error("Loader did not become ready")
        return 1
    return 1 if errors else 0


async def call_script(config: LoaderConfig, logger: Logger, name: str, script_args: List[str]) -> int:
    """Load, then run a single script and print its reply."""
    loader = LuaLoader(config=config, logger=logger)
    try:
        await loader.start()
        if not loader.is_ready:
            logger.error("Loader did not become ready")
            return 1

        reply = await loader.get(name).run(*script_args)
    finally:
        await loader.close()
    print(reply)
    return 0


async def kill_script(config: LoaderConfig, logger: Logger) -> int:
    loader = LuaLoader(config=config, logger=logger)
    try:
        await loader.script_kill()
    finally:
        await loader.close()
    print("OK")
    return 0


async def main_async(args) -> int:
    config = build_config(args)
    logger = Logger(name=__package_name__, level=args.log_level or config.log_level)

    try:
        if args.command == "list":
            return await list_scripts(config)
        if args.command == "load":
            return await load_scripts(config, logger)
        if args.command == "call":
            return await call_script(config, logger, args.name, args.script_args)
        if args.command == "kill":
            return await kill_script(config, logger)
    except LuaLoaderError as e:
        logger.error(str(e))
        return 1

    return 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="redis-lua-loader",
        description="Load Lua scripts into Redis and call them by name",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""\
Examples:
  redis-lua-loader list lua                       Show scripts and their names
  redis-lua-loader load lua lua2                  Load two directories, print SHAs
  redis-lua-loader call returnOne 0               Run returnOne with no keys
  redis-lua-loader call incrBy 1 counter 5        One key (counter), one arg (5)
  redis-lua-loader kill                           SCRIPT KILL

Environment:
  REDIS_URL             Redis connection URL (default redis://localhost:6379/0)
  LUA_LOADER_SRC        Script directories, separated by the path separator
  LUA_LOADER_PRELOAD    false to use EVAL instead of SCRIPT LOAD + EVALSHA
  LUA_LOADER_NAMESPACE  true to name scripts by their relative path
"""
    )

    parser.add_argument(
        "--version", "-v",
        action="store_true",
        help="Show version and exit"
    )
    parser.add_argument(
        "--src", "-s",
        action="append",
        help="Script directory (repeatable, overrides LUA_LOADER_SRC)"
    )
    parser.add_argument(
        "--redis-url",
        help="Redis URL (overrides REDIS_URL)"
    )
    parser.add_argument(
        "--direct",
        action="store_true",
        help="Send script sources with EVAL instead of loading them"
    )
    parser.add_argument(
        "--namespace",
        action="store_true",
        help="Name scripts by their directory-relative path"
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level (default: LOG_LEVEL or DEBUG)"
    )

    sub = parser.add_subparsers(dest="command")
    listing = sub.add_parser("list", help="List script files and their names")
    listing.add_argument("dirs", nargs="*", help="Script directories (added to --src)")
    load = sub.add_parser("load", help="Load scripts and print their SHAs")
    load.add_argument("dirs", nargs="*", help="Script directories (added to --src)")
    call = sub.add_parser("call", help="Run one script")
    call.add_argument("name", help="Script name, e.g. returnOne")
    call.add_argument("script_args", nargs="*", help="numkeys, keys, then arguments")
    sub.add_parser("kill", help="SCRIPT KILL")

    return parser


def main(argv=None):
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.version:
        print(f"{__package_name__} v{__version__}")
        sys.exit(0)

    if not args.command:
        parser.print_help()
        sys.exit(2)

    sys.exit(asyncio.run(main_async(args)))


if __name__ == "__main__":
    main()
