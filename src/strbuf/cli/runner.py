"""Name-indexed dispatch for the demo programs."""

from __future__ import annotations

import argparse
import sys
from dataclasses import dataclass
from typing import Callable, Optional, Sequence, TextIO

from strbuf.runtime import telemetry


@dataclass(frozen=True, slots=True)
class Demo:
    name: str
    description: str
    fn: Callable[[], None]

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("demo name cannot be empty")
        if not callable(self.fn):
            raise TypeError("fn must be callable")


def hr(label: str = "", *, out: TextIO | None = None) -> None:
    """Print a section header rule, optionally prefixed by ``label``."""

    stream = out or sys.stdout
    stream.write("\n")
    if label:
        stream.write(f"---- {label} ")
    stream.write("-------------------------------------------\n")


def _parse_args(argv: Sequence[str], section: str) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description=f"Run a demo from the '{section}' section.", add_help=True
    )
    parser.add_argument(
        "-l", "--list", action="store_true", help="List available demos and exit"
    )
    parser.add_argument("demo", nargs="?", help="Name of the demo to run")
    return parser.parse_args(list(argv))


def print_listing(section: str, demos: Sequence[Demo], *, prog: str) -> None:
    print(f"Section: {section}\nAvailable demos:")
    for demo in demos:
        print(f"  - {demo.name}  : {demo.description}")
    print(f"\nRun: {prog} <demo-name>")


def run_cli(
    section: str,
    demos: Sequence[Demo],
    argv: Optional[Sequence[str]] = None,
    *,
    prog: str | None = None,
) -> int:
    """Dispatch ``argv`` to one of ``demos``; return the exit status."""

    args = _parse_args(sys.argv[1:] if argv is None else argv, section)
    program = prog or "strbuf-demo"
    if args.list or not args.demo:
        print_listing(section, demos, prog=program)
        return 0

    for demo in demos:
        if demo.name == args.demo:
            with telemetry.span(
                f"demo::{demo.name}", logger_name="strbuf.cli", component="cli"
            ):
                demo.fn()
            return 0

    print(
        f"Unknown demo '{args.demo}'. Use --list to see options.", file=sys.stderr
    )
    telemetry.record_event(
        "demo.unknown",
        level="warning",
        data={"name": args.demo},
        logger_name="strbuf.cli",
    )
    return 1


__all__ = ["Demo", "hr", "print_listing", "run_cli"]
