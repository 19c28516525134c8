"""Keysmith entrypoint: command-line caller for generation, scoring and breach checks."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import List, Optional, Sequence

from keysmith.breach.checker import BreachChecker
from keysmith.config import PRESETS, Config, get_preset, write_default_config
from keysmith.crypto.engine import PasswordGenerator
from keysmith.crypto.strength import score
from keysmith.errors import BreachServiceError, KeysmithError
from keysmith.policy.models import CharacterClass, Policy

logger = logging.getLogger("keysmith")

EXIT_OK = 0
EXIT_BREACH_FAILED = 1
EXIT_GENERATION_FAILED = 2

_CLASS_FLAGS = {
    "no_upper": CharacterClass.UPPER,
    "no_lower": CharacterClass.LOWER,
    "no_digits": CharacterClass.DIGIT,
    "no_symbols": CharacterClass.SYMBOL,
}


def _length(value: str) -> int:
    n = int(value)
    if not Config.MIN_GENERATED_PASSWORD_LENGTH <= n <= Config.MAX_GENERATED_PASSWORD_LENGTH:
        raise argparse.ArgumentTypeError(
            f"length must be between {Config.MIN_GENERATED_PASSWORD_LENGTH} "
            f"and {Config.MAX_GENERATED_PASSWORD_LENGTH}"
        )
    return n


def _count(value: str) -> int:
    n = int(value)
    if not 1 <= n <= Config.MAX_BATCH_COUNT:
        raise argparse.ArgumentTypeError(f"count must be between 1 and {Config.MAX_BATCH_COUNT}")
    return n


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="keysmith", description="Generate policy-compliant passwords."
    )
    parser.add_argument("--preset", choices=sorted(PRESETS), help="policy preset")
    parser.add_argument("--length", type=_length, help="override the preset length")
    parser.add_argument("--no-upper", action="store_true", help="exclude A-Z")
    parser.add_argument("--no-lower", action="store_true", help="exclude a-z")
    parser.add_argument("--no-digits", action="store_true", help="exclude 0-9")
    parser.add_argument("--no-symbols", action="store_true", help="exclude symbols")
    parser.add_argument(
        "--allow-ambiguous", action="store_true", help="keep O 0 l 1 I | in the pool"
    )
    parser.add_argument(
        "--allow-repeats", action="store_true", help="do not limit repeated characters"
    )
    parser.add_argument("--count", type=_count, default=1, help="passwords to generate")
    parser.add_argument(
        "--check-breach",
        action="store_true",
        help="check each password against Have I Been Pwned (k-anonymity)",
    )
    parser.add_argument("--data-dir", type=Path, help="override the data directory")
    parser.add_argument("--verbose", "-v", action="store_true", help="log to stderr")
    return parser


def build_policy(args: argparse.Namespace, preset: str) -> Policy:
    """Apply command-line overrides to a fresh copy of *preset*."""
    policy = get_preset(preset)
    if args.length is not None:
        policy.length = args.length

    disabled = {cls for flag, cls in _CLASS_FLAGS.items() if getattr(args, flag)}
    if disabled:
        policy.classes = frozenset(policy.classes - disabled)
        policy.min_per_class = {
            cls: n for cls, n in policy.min_per_class.items() if cls not in disabled
        }
    if args.allow_ambiguous:
        policy.avoid_ambiguous = False
    if args.allow_repeats:
        policy.avoid_repeats = False
    return policy


async def check_all(checker: BreachChecker, passwords: Sequence[str]) -> list:
    """Check every password; failures come back as exception instances."""
    return await asyncio.gather(
        *(checker.check(pw) for pw in passwords), return_exceptions=True
    )


def _report_breaches(passwords: Sequence[str], results: list) -> int:
    status = EXIT_OK
    for index, (pw, result) in enumerate(zip(passwords, results), 1):
        if isinstance(result, BreachServiceError):
            print(f"[{index}] breach check failed: {result}", file=sys.stderr)
            status = EXIT_BREACH_FAILED
        elif isinstance(result, BaseException):
            raise result
        elif result.breached:
            print(f"[{index}] FOUND in breaches ({result.occurrence_count} times) - do not use")
        else:
            print(f"[{index}] not found in known breaches")
    return status


def main(argv: Optional[List[str]] = None) -> int:
    """Application entry point."""
    # 1. Check dependencies
    from keysmith import check_dependencies

    check_dependencies()

    args = build_parser().parse_args(argv)

    # 2. Resolve data directory
    from keysmith.paths import get_data_dir

    data_dir = args.data_dir or get_data_dir()
    data_dir.mkdir(parents=True, exist_ok=True)

    # 3. Initialise logging
    from keysmith.logging_setup import setup_secure_logging

    setup_secure_logging(
        data_dir, level=logging.DEBUG if args.verbose else logging.INFO, console=args.verbose
    )

    # 4. Default settings on first run
    if not Config.config_exists(data_dir):
        logger.info("First run: writing default configuration")
        write_default_config(data_dir)

    # 5. Generate
    preset = args.preset or Config.get_default_preset(data_dir)
    policy = build_policy(args, preset)
    generator = PasswordGenerator()

    passwords = []
    try:
        for _ in range(args.count):
            passwords.append(generator.generate(policy))
    except KeysmithError as exc:
        logger.error("Generation failed: %s", exc)
        print(f"ERROR: {exc}", file=sys.stderr)
        return EXIT_GENERATION_FAILED

    for index, pw in enumerate(passwords, 1):
        report = score(pw, policy)
        print(
            f"[{index}] {pw}  {report.entropy_bits:.1f} bits  "
            f"{report.label} ({report.normalized_score}%)"
        )

    # 6. Optional breach check; its failure never hides the passwords above
    if not args.check_breach:
        return EXIT_OK

    settings = Config.get_breach_settings(data_dir)
    checker = BreachChecker(api_url=settings["api_url"], timeout=settings["timeout"])
    try:
        results = asyncio.run(check_all(checker, passwords))
    except KeyboardInterrupt:
        logger.info("Breach check interrupted by user")
        return EXIT_BREACH_FAILED
    return _report_breaches(passwords, results)


if __name__ == "__main__":
    sys.exit(main())
