# src/divgrid/cli.py

"""
Divisor Grid - integers laid out by their divisors

Description:
    Draws the rows of multiples of d = level, level+1, ... around an integer
    key, reports number statistics for the key, and steps the key through
    integer sequences (Collatz, Pell, Fibonacci, OEIS lookups, custom lists).

usage: divgrid -h
"""

from __future__ import annotations

import argparse
import faulthandler
import logging
import os
import shutil
import sys
import textwrap
import threading
import time
import traceback
from importlib.resources import files as pkg_files

from colorama import Fore, Style
from colorama import init as colorama_init

from divgrid import __version__ as _ver
from divgrid import config as CONFIG
from divgrid.display import format_step, print_grid, print_info, print_variants
from divgrid.expreval import parse_int
from divgrid.grid import clamp_level
from divgrid.oeis import BuiltinCatalog, OeisResolver
from divgrid.registry import discover
from divgrid.runtime import APPLY, CFG
from divgrid.runtime import current as _rt_current
from divgrid.scanner import scan_level
from divgrid.sequencer import Sequencer
from divgrid.sequences import StepStatus
from divgrid.utility import UserInputError
from divgrid.workspace import seed_workspace, workspace_dir

DEFAULT_KEY = 27


def _install_loud_error_handlers(debug: bool) -> None:
    """With --debug, uncaught errors (OEIS worker thread included) print full tracebacks."""
    if not debug:
        return
    faulthandler.enable()

    def _report(where: str, exc_type, exc, tb) -> None:
        print(f"\n[{where}]", file=sys.stderr)
        traceback.print_exception(exc_type, exc, tb, file=sys.stderr)
        sys.stderr.flush()

    def _thread_hook(args) -> None:
        name = args.thread.name if args.thread is not None else "a thread"
        _report(f"uncaught exception in {name}", args.exc_type, args.exc_value, args.exc_traceback)

    sys.excepthook = lambda *info: _report("uncaught exception", *info)
    threading.excepthook = _thread_hook


def _configure_logging(debug: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="[%(levelname)s] %(name)s: %(message)s",
        stream=sys.stderr,
        force=True,
    )


def _print_user_error(msg: str) -> None:
    print(f"{Fore.RED}Error:{Style.RESET_ALL} {msg}", file=sys.stderr)


def _select_profile_name(explicit: str | None) -> str:
    """--profile, else the remembered profile, else 'default'."""
    if explicit:
        if not CONFIG.has_profile(explicit):
            available = ", ".join(CONFIG.profile_names()) or "(none)"
            raise UserInputError(f"Unknown profile: '{explicit}'. Available profiles: {available}")
        return explicit
    last = CONFIG.remembered_profile()
    return last if last and CONFIG.has_profile(last) else "default"


def _load_profile(explicit: str | None, debug: bool) -> str:
    profile = CONFIG.load_profile(_select_profile_name(explicit))
    APPLY(profile)
    if explicit:
        CONFIG.remember_profile(explicit)

    # keys up to BEHAVIOUR.MAX_DIGITS must survive int() and str()
    if not os.environ.get("PYTHONINTMAXSTRDIGITS"):
        try:
            sys.set_int_max_str_digits(int(CFG("BEHAVIOUR.MAX_DIGITS", 100_000)))
        except ValueError:
            pass

    if debug:
        print(f"[debug] profile {profile.name} ({profile.path})", file=sys.stderr)
        for section, values in sorted(_rt_current().sections.items()):
            for key, value in sorted(values.items()):
                print(f"        {section}.{key:.<30} {value!r}", file=sys.stderr)
    return profile.name


# ---- argparse ----
def _build_parser() -> argparse.ArgumentParser:

    epilog = textwrap.dedent("""\
    integers:
      KEY accepts literals (1_000_000, 0xFF, 123 456 789) and integer
      expressions (2**61-1, 20!, 3*1e6, (1<<40)+15).

    examples:
      divgrid grid 360 --level 2 --rows 12
      divgrid run collatz --key 27
      divgrid run oeis --oeis A000045 --steps 15
      divgrid run custom --list "3, 1, 4, 1, 5"
    """)

    p = argparse.ArgumentParser(
        prog="divgrid",
        description="Divisor Grid — integers laid out by their divisors",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=epilog,
    )
    p.add_argument("--profile", default=None, help="Settings profile to use (remembered as the active one)")
    p.add_argument("--debug", action="store_true", help="Debug logging and full tracebacks")
    p.add_argument("--version", action="version", version=f"%(prog)s {_ver}")
    sub = p.add_subparsers(dest="command", metavar="COMMAND")
    sub.required = True

    g = sub.add_parser("grid", help="Draw the divisor grid around KEY")
    g.add_argument("key", metavar="KEY")
    g.add_argument("--level", default="1", help="First divisor row (values below 1 become 1)")
    g.add_argument("--rows", type=int, default=None, help="Number of divisor rows (GRID.ROWS)")
    g.add_argument("--columns", type=int, default=None, help="Grid width in characters (GRID.COLUMNS)")
    g.add_argument("--leg", type=int, default=0, help="Also highlight columns ±LEG on rows dividing KEY")

    r = sub.add_parser("run", help="Step KEY through a sequence variant")
    r.add_argument("variant", metavar="VARIANT", nargs="?", default=None,
                   help="Variant tag (see 'divgrid variants'); default SEQUENCES.DEFAULT")
    r.add_argument("--key", default=str(DEFAULT_KEY), help=f"Starting key (default {DEFAULT_KEY})")
    r.add_argument("--steps", type=int, default=None, help="Stop after this many values (SEQUENCES.MAX_STEPS)")
    r.add_argument("--list", dest="custom", default=None, metavar="TEXT",
                   help="Comma-separated integers for the 'custom' variant")
    r.add_argument("--oeis", default=None, metavar="ID", help="A-number for the 'oeis' variant, e.g. A000045")

    i = sub.add_parser("info", help="Number statistics for KEY")
    i.add_argument("key", metavar="KEY")

    s = sub.add_parser("scan", help="Next divisor level of KEY after LEVEL")
    s.add_argument("key", metavar="KEY")
    s.add_argument("--level", default="1")

    sub.add_parser("variants", help="List the sequence variants")
    sub.add_parser("profiles", help="List the settings profiles")

    w = sub.add_parser("init", help="Create the workspace and copy packaged profiles/data if missing")
    w.add_argument("--overwrite", action="store_true",
                   help="Developers only (needs DIVGRID_DEV=1): replace workspace files with packaged copies")
    sub.add_parser("where", help="Show the workspace and package paths")

    return p


def main(argv=None) -> int:
    """Thin wrapper: catch friendly errors, hide tracebacks unless debug."""
    try:
        return _main_impl(argv)
    except UserInputError as e:
        _print_user_error(str(e))
        return 2
    except KeyboardInterrupt:
        print("Aborted by user.", file=sys.stderr)
        return 130
    except Exception as e:
        debug = "--debug" in (argv if argv is not None else sys.argv)
        if debug:
            raise
        print(f"Unexpected error: {e.__class__.__name__}: {e}", file=sys.stderr)
        print("Run with --debug for a full traceback.", file=sys.stderr)
        return 1


# ---- commands ----


def _cmd_grid(args) -> int:
    key = parse_int(args.key)
    level = clamp_level(parse_int(args.level))
    rows = args.rows if args.rows is not None else int(CFG("GRID.ROWS", 24))
    columns = args.columns
    if columns is None:
        columns = int(CFG("GRID.COLUMNS", shutil.get_terminal_size().columns - 1))
    if rows < 0:
        raise UserInputError(f"--rows must be >= 0, got {rows}")
    if columns < 1:
        raise UserInputError(f"--columns must be >= 1, got {columns}")
    block_size = int(CFG("GRID.BLOCK_SIZE", 1))
    print_grid(key, level, rows=rows, columns=columns, leg=args.leg, block_size=block_size)
    return 0


def _cmd_run(args) -> int:
    key = parse_int(args.key)
    steps = args.steps if args.steps is not None else int(CFG("SEQUENCES.MAX_STEPS", 1_000))
    poll = float(CFG("OEIS.POLL_INTERVAL_S", 0.1))
    variant = args.variant or CFG("SEQUENCES.DEFAULT", "collatz")

    with OeisResolver() as resolver:
        seq = Sequencer(source=resolver, default=variant)
        if args.custom is not None:
            seq.set_custom_list(args.custom)
        if args.oeis is not None:
            seq.set_external_id(args.oeis)

        current = seq.variant
        print(f"{Fore.CYAN}{Style.BRIGHT}{current.label}{Style.RESET_ALL}"
              + (f"  {current.link}" if current.link else ""))

        emitted = 0
        while emitted < steps:
            result = seq.step(key)
            if result.status is StepStatus.LOADING:
                time.sleep(poll)
                continue
            print(format_step(result))
            if result.status is StepStatus.FINISHED:
                return 0
            if result.status is StepStatus.UNAVAILABLE:
                return 1
            if result.status is not StepStatus.VALUE:
                return 2
            key = result.value
            emitted += 1

    print(f"{Fore.YELLOW}stopped after {emitted} values{Style.RESET_ALL}")
    return 0


def _cmd_info(args) -> int:
    print_info(parse_int(args.key))
    return 0


def _cmd_scan(args) -> int:
    key = parse_int(args.key)
    res = scan_level(key, parse_int(args.level))
    tail = f" {Fore.YELLOW}(reached |key|, next scan restarts at 1){Style.RESET_ALL}" if res.exhausted else ""
    print(f"level {res.level}{tail}")
    return 0


def _cmd_variants(args) -> int:
    print_variants(discover(), BuiltinCatalog().identifiers())
    return 0


def _cmd_profiles(args) -> int:
    pairs = CONFIG.describe_profiles()
    if not pairs:
        print("Available profiles: (none)")
        return 0
    active = _rt_current().profile_name
    print("Available profiles:")
    for name, desc in pairs:
        mark = "*" if name == active else " "
        print(f"  {mark} {name:13} — {desc}")
    return 0


def _cmd_init(args) -> int:
    if args.overwrite:
        if os.environ.get("DIVGRID_DEV") != "1":
            print("Refusing to overwrite: set DIVGRID_DEV=1 to enable developer overwrite.")
            return 2
        copied = seed_workspace(overwrite=True)
        print(f"Workspace ready at: {workspace_dir()} (overwrote existing files)")
    else:
        copied = seed_workspace()
        print(f"Workspace ready at: {workspace_dir()}")
    print(f"Copied -> profiles: {copied.get('profiles', 0)}, data: {copied.get('data', 0)}")
    return 0


def _cmd_where(args) -> int:
    print(f"Workspace: {workspace_dir()}")
    print(f"Package:   {pkg_files('divgrid')}")
    return 0


_COMMANDS = {
    "grid": _cmd_grid,
    "run": _cmd_run,
    "info": _cmd_info,
    "scan": _cmd_scan,
    "variants": _cmd_variants,
    "profiles": _cmd_profiles,
    "init": _cmd_init,
    "where": _cmd_where,
}


# ---- main ----
def _main_impl(argv=None) -> int:

    colorama_init(autoreset=True)

    parser = _build_parser()
    args = parser.parse_args(argv)
    rt = _rt_current()
    rt.debug = bool(args.debug)

    # init must work before any profile exists
    if args.command == "init":
        _configure_logging(args.debug)
        return _cmd_init(args)

    seed_workspace()
    _load_profile(args.profile, args.debug)

    debug = args.debug or rt.debug
    _configure_logging(debug)
    _install_loud_error_handlers(debug)

    return _COMMANDS[args.command](args)
