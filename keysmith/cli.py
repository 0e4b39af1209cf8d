"""CLI for keysmith: generate, check, defaults."""

import argparse
import json
import sys

from loguru import logger
from rich import print
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from .config import load_config, make_sampler, max_attempts, weakness_policy
from .errors import GenerationExhausted, MalformedRequirements, RandomSourceUnavailable
from .evaluator import assess_password
from .generator import generate_password
from .requirements import CLASS_DEFAULTS, PasswordClass

EXIT_WEAK = 1
EXIT_MALFORMED = 2
EXIT_FAILED = 3

# (flag dest, requirements key)
_FLAG_KEYS = (
    ("min_length", "min_length"),
    ("max_length", "max_length"),
    ("allowed", "allowed_characters"),
    ("disallowed", "disallowed_characters"),
    ("require", "required_character_sets"),
    ("cannot_start_with", "cannot_start_with"),
    ("cannot_end_with", "cannot_end_with"),
    ("group_size", "group_size"),
    ("groups", "number_of_groups"),
    ("separator", "separator"),
    ("max_consecutive", "max_consecutive_identical_chars"),
)

def _setup_logging(verbose: bool) -> None:
    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if verbose else "WARNING")
    logger.enable("keysmith")

def build_requirements(args):
    """Merge --requirements FILE with the individual flags; flags win. None when nothing was given."""
    requirements = {}
    if args.requirements:
        with open(args.requirements, "r", encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError(f"{args.requirements} must hold a JSON object")
        requirements.update(data)
    for dest, key in _FLAG_KEYS:
        value = getattr(args, dest)
        if value is not None:
            requirements[key] = value
    return requirements or None

def cmd_generate(args):
    cfg = load_config()
    password_class = args.type or cfg.get("default_type", "generic")
    try:
        requirements = build_requirements(args)
    except (OSError, ValueError) as e:
        print(f"[red]Could not read requirements file: {escape(str(e))}[/red]")
        return EXIT_MALFORMED
    sampler = make_sampler(cfg)
    policy = weakness_policy(cfg)
    for i in range(args.copies):
        try:
            pw = generate_password(
                password_class,
                requirements,
                sampler=sampler,
                policy=policy,
                max_attempts=max_attempts(cfg),
            )
        except (MalformedRequirements, ValueError) as e:
            print(f"[red]Invalid requirements: {escape(str(e))}[/red]")
            return EXIT_MALFORMED
        except (GenerationExhausted, RandomSourceUnavailable) as e:
            print(f"[red]Generation failed: {escape(str(e))}[/red]")
            return EXIT_FAILED
        print(f"[bold green]Password #{i+1}:[/bold green] {escape(pw)}")
    return 0

def cmd_check(args):
    cfg = load_config()
    result = assess_password(args.password, weakness_policy(cfg))
    verdict = "[red]Weak[/red]" if result["weak"] else "[green]Strong[/green]"
    body = f"Estimated entropy: {result['entropy']:.1f} bits"
    print(Panel(body, title=f"Verdict: {verdict}"))
    if result["reasons"]:
        print("[bold]Detections:[/bold]")
        for reason in result["reasons"]:
            print(f" • {escape(reason)}")
    return EXIT_WEAK if result["weak"] else 0

def cmd_defaults(args):
    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("Type")
    table.add_column("Length")
    table.add_column("Grouping")
    table.add_column("Required sets")
    table.add_column("Alphabet")
    for password_class, defaults in CLASS_DEFAULTS.items():
        g = defaults.grouping
        table.add_row(
            password_class.value,
            str(defaults.length),
            f"{g.group_size} x {g.number_of_groups} '{g.separator}'",
            ", ".join(cs.name for cs in defaults.required_character_sets),
            escape(defaults.alphabet),
        )
    print(table)
    return 0

def make_parser():
    parser = argparse.ArgumentParser(prog="keysmith")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging on stderr")
    sub = parser.add_subparsers(dest="cmd", required=True)

    gen = sub.add_parser("generate", help="Generate one or more passwords")
    gen.add_argument("--type", "-t", choices=[c.value for c in PasswordClass], help="Password type")
    gen.add_argument("--min-length", type=int, help="Minimum length")
    gen.add_argument("--max-length", type=int, help="Maximum length")
    gen.add_argument("--allowed", type=str, help="Allowed characters")
    gen.add_argument("--disallowed", type=str, help="Characters that must not appear")
    gen.add_argument("--require", action="append", metavar="SET",
                     help="Required character set (uppercase, lowercase, digits, punctuation); repeatable")
    gen.add_argument("--cannot-start-with", type=str, help="Password must not start with this string")
    gen.add_argument("--cannot-end-with", type=str, help="Password must not end with this string")
    gen.add_argument("--group-size", type=int, help="Characters per group")
    gen.add_argument("--groups", type=int, help="Number of groups")
    gen.add_argument("--separator", type=str, help="Group separator (default '-')")
    gen.add_argument("--max-consecutive", type=int, help="Longest allowed run of one character")
    gen.add_argument("--requirements", "-r", type=str, help="JSON file with requirements")
    gen.add_argument("--copies", type=int, default=1, help="How many passwords to generate")
    gen.set_defaults(func=cmd_generate)

    chk = sub.add_parser("check", help="Check whether a password is weak")
    chk.add_argument("password", type=str, help="Password to evaluate (wrap in quotes)")
    chk.set_defaults(func=cmd_check)

    dfl = sub.add_parser("defaults", help="Show the built-in defaults per password type")
    dfl.set_defaults(func=cmd_defaults)
    return parser

def main(argv=None):
    parser = make_parser()
    args = parser.parse_args(argv)
    _setup_logging(args.verbose)
    return args.func(args)

if __name__ == "__main__":
    sys.exit(main())
