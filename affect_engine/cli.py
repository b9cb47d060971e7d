"""
Affect Engine - CLI.

============================================================
RESPONSIBILITY
============================================================
Command-line access to the analysis pipeline.

- analyze:     sentiment, intent, categories and suggestions
- mode:        presentation mode and recommendations for a label
- readability: simplified Flesch reading ease
- summarize:   extractive summary

Text arguments default to stdin when omitted or given as "-".

============================================================
USAGE
============================================================
python -m affect_engine.cli analyze "The app keeps crashing"
python -m affect_engine.cli analyze --remote --provider gemini --json < ticket.txt
python -m affect_engine.cli mode frustrated
python -m affect_engine.cli readability "Short text. Another one."

============================================================
"""

import argparse
import asyncio
import json
import logging
import sys
from dataclasses import replace
from typing import List, Optional

from . import __version__
from .analyzer import AffectAnalyzer
from .config import EngineConfig, get_config
from .models import AnalysisResult, ProviderKind
from .modes import select_mode
from .suggestions import recommend_for_mood
from .text_tools import ReadabilityReport, check_readability, summarize_text


# ============================================================
# CLI ARGUMENT PARSER
# ============================================================

def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="affect-engine",
        description="Affect inference for free text",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s analyze "Could you add dark mode?"
  %(prog)s analyze --remote --provider openai --json < message.txt
  %(prog)s mode anxious
  %(prog)s summarize < article.txt
        """
    )

    # --------------------------------------------------------
    # Logging Options
    # --------------------------------------------------------
    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default="WARNING",
        help="Logging level (default: WARNING)",
    )

    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    # --------------------------------------------------------
    # analyze
    # --------------------------------------------------------
    analyze_parser = subparsers.add_parser("analyze", help="Analyze text")
    analyze_parser.add_argument("text", nargs="?", default="-", help="Text to analyze (default: stdin)")
    analyze_parser.add_argument(
        "--remote",
        action="store_true",
        help="Augment with the configured remote provider",
    )
    analyze_parser.add_argument(
        "--provider",
        type=str,
        choices=[k.value for k in ProviderKind],
        help="Remote provider (default: AFFECT_PROVIDER or openai)",
    )
    analyze_parser.add_argument("--model", type=str, help="Remote model name")
    analyze_parser.add_argument(
        "--config",
        type=str,
        metavar="PATH",
        help="YAML config file (default: environment)",
    )
    analyze_parser.add_argument("--json", action="store_true", help="Print JSON")

    # --------------------------------------------------------
    # mode
    # --------------------------------------------------------
    mode_parser = subparsers.add_parser("mode", help="Presentation mode for a mood or sentiment label")
    mode_parser.add_argument("label", help="Mood or sentiment label, e.g. frustrated")
    mode_parser.add_argument("--json", action="store_true", help="Print JSON")

    # --------------------------------------------------------
    # text tools
    # --------------------------------------------------------
    readability_parser = subparsers.add_parser("readability", help="Readability score")
    readability_parser.add_argument("text", nargs="?", default="-", help="Text (default: stdin)")
    readability_parser.add_argument("--json", action="store_true", help="Print JSON")

    summarize_parser = subparsers.add_parser("summarize", help="Extractive summary")
    summarize_parser.add_argument("text", nargs="?", default="-", help="Text (default: stdin)")

    return parser


# ============================================================
# CLI CONFIGURATION BUILDER
# ============================================================

def build_config(args: argparse.Namespace) -> EngineConfig:
    """
    Build engine configuration from a YAML file or the environment,
    then apply CLI overrides.
    """
    base = EngineConfig.from_yaml(args.config) if args.config else get_config()
    config = replace(base)

    if args.remote:
        config.use_remote = True
    if args.provider:
        config.provider = ProviderKind(args.provider)
    if args.model:
        config.model_name = args.model

    return config


def read_text(value: str) -> str:
    return sys.stdin.read() if value == "-" else value


# ============================================================
# OUTPUT
# ============================================================

def format_result(result: AnalysisResult) -> str:
    """Human-readable rendering of an analysis result."""
    lines = [
        f"Sentiment:  {result.sentiment.label.value} ({result.sentiment.score:+d})",
        f"Intent:     {result.intent.value}",
        f"Categories: {', '.join(sorted(c.value for c in result.categories)) or '-'}",
        f"Source:     {result.source}",
        "Suggestions:",
    ]
    lines.extend(f"  - {s}" for s in result.suggestions)
    return "\n".join(lines)


def format_readability(report: ReadabilityReport) -> str:
    return "\n".join([
        f"Readability Score: {report.score}/100",
        f"Reading Level:     {report.level}",
        f"Word Count:        {report.words}",
        f"Sentence Count:    {report.sentences}",
        f"Avg. Words/Sent.:  {report.avg_words_per_sentence:.1f}",
    ])


# ============================================================
# COMMANDS
# ============================================================

async def async_analyze(args: argparse.Namespace) -> int:
    """Run one analysis and print it."""
    config = build_config(args)
    text = read_text(args.text)

    analyzer = AffectAnalyzer()
    try:
        result = await analyzer.analyze(text, config.analysis_options())
    finally:
        await analyzer.close()

    if args.json:
        print(json.dumps(result.to_dict(), indent=2))
    else:
        print(format_result(result))
    return 0


def run_mode(args: argparse.Namespace) -> int:
    mode = select_mode(args.label)
    recommendations = recommend_for_mood(args.label)

    if args.json:
        print(json.dumps({
            "label": args.label,
            "mode": mode.value,
            "recommendations": recommendations,
        }, indent=2))
    else:
        print(f"Mode: {mode.value}")
        for item in recommendations:
            print(f"  - {item}")
    return 0


def run_readability(args: argparse.Namespace) -> int:
    report = check_readability(read_text(args.text))

    if isinstance(report, str):
        print(report)
        return 1

    if args.json:
        print(json.dumps(report.to_dict(), indent=2))
    else:
        print(format_readability(report))
    return 0


def run_summarize(args: argparse.Namespace) -> int:
    print(summarize_text(read_text(args.text)))
    return 0


# ============================================================
# MAIN ENTRY POINT
# ============================================================

def main(argv: Optional[List[str]] = None) -> int:
    """
    Main CLI entry point.

    Args:
        argv: Command line arguments (default: sys.argv[1:])

    Returns:
        Exit code
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        if args.command == "analyze":
            return asyncio.run(async_analyze(args))
        if args.command == "mode":
            return run_mode(args)
        if args.command == "readability":
            return run_readability(args)
        if args.command == "summarize":
            return run_summarize(args)
    except KeyboardInterrupt:
        logging.info("Interrupted by user")
        return 130

    parser.print_help()
    return 2


if __name__ == "__main__":
    sys.exit(main())
