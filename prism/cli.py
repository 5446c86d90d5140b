"""Command-line interface for PRISM.

Examples::

    prism analyze story.md
    prism analyze story.md --generate uml,tests --json
    prism analyze --text "As a user, I want to login quickly" --preset standard
    echo "As a user, I want to login quickly" | prism analyze - --generate all
    prism batch ./requirements --parallel 8 --output ./reports
    prism config --provider ollama --model llama3.1:latest
    prism config --show --test
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path

from rich.markup import escape
from rich.table import Table

from prism import __version__
from prism.analysis.models import AnalysisResult, ArtifactType, GenerationRequest, RequirementText
from prism.batch import BatchItemResult, analyze_batch
from prism.config import Config
from prism.errors import ConfigurationError
from prism.llm_client import LlmClient
from prism.pipeline import RequirementPipeline
from prism.utils import (
    analysis_summary,
    configure_logging,
    console,
    create_progress,
    discover_requirement_files,
    format_duration,
    print_ambiguity_table,
    print_error,
    print_section_header,
    print_success,
    print_summary_table,
    print_warning,
    read_requirement_file,
    save_json,
)

ARTIFACT_FILENAMES: dict[ArtifactType, str] = {
    ArtifactType.UML: "diagrams.puml",
    ArtifactType.PSEUDO: "pseudocode.txt",
    ArtifactType.TESTS: "test_scenarios.md",
    ArtifactType.IMPROVE: "improved_requirements.md",
    ArtifactType.NFR: "nfr_catalogue.md",
}

# Artifact sets behind --preset; --generate adds to them.
PRESET_ARTIFACTS: dict[str, tuple[str, ...]] = {
    "basic": (),
    "standard": ("uml", "pseudo", "tests"),
    "full": ("all",),
    "report": ("uml", "tests", "improve"),
}


# ---------------------------------------------------------------------------
# Argument parsing
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--generate", "-g",
        default="",
        help="Comma-separated artifacts: uml, pseudo, tests, improve, nfr or all",
    )
    common.add_argument(
        "--preset",
        choices=sorted(PRESET_ARTIFACTS),
        default=None,
        help="Artifact set: basic (none), standard (uml, pseudo, tests), "
             "full (all) or report (uml, tests, improve)",
    )
    common.add_argument(
        "--style",
        default=None,
        help="Pseudocode style: generic or python (default: from config)",
    )
    common.add_argument(
        "--ai",
        action="store_true",
        help="Augment the analysis with the configured AI provider",
    )
    common.add_argument(
        "--provider",
        choices=["ollama", "openai"],
        default=None,
        help="AI provider to use with --ai (default: from config)",
    )
    common.add_argument(
        "--threshold",
        type=float,
        default=None,
        help="Skip ambiguity passes with confidence below this value (0-1)",
    )
    common.add_argument(
        "--json",
        action="store_true",
        help="Print the full result as JSON instead of tables",
    )
    common.add_argument(
        "--output", "-o",
        default=None,
        help="Directory to write result JSON and artifacts into",
    )
    common.add_argument(
        "--config",
        default=None,
        help="Config file (default: ~/.prism/config.json)",
    )
    common.add_argument("--verbose", "-v", action="store_true", help="Debug logging")

    parser = argparse.ArgumentParser(
        prog="prism",
        description="PRISM -- requirement analysis and artifact generation",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  prism analyze story.md --generate uml,tests\n"
            "  prism analyze --text \"As a user, I want to login quickly\" --preset full\n"
            "  prism analyze - --json < story.md\n"
            "  prism batch ./requirements --parallel 8 -o ./reports\n"
            "  prism config --provider openai --api-key sk-... --test\n"
        ),
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    sub = parser.add_subparsers(dest="command", required=True)

    analyze_cmd = sub.add_parser(
        "analyze", parents=[common], help="Analyse one requirement file, stdin or inline text"
    )
    analyze_cmd.add_argument(
        "file", nargs="?", default=None, help="Requirement file, or '-' to read stdin"
    )
    analyze_cmd.add_argument(
        "--text", "-t", default=None, help="Requirement text to analyse instead of a file"
    )

    batch_cmd = sub.add_parser(
        "batch", parents=[common], help="Analyse every .txt/.md file in a directory"
    )
    batch_cmd.add_argument("directory", help="Directory to scan recursively")
    batch_cmd.add_argument(
        "--parallel", "-p",
        type=int,
        default=None,
        help="Maximum analyses in flight (default: from config)",
    )

    config_cmd = sub.add_parser(
        "config", help="Set, show or test the saved configuration"
    )
    config_cmd.add_argument(
        "--provider", choices=["none", "ollama", "openai"], default=None, help="AI provider"
    )
    config_cmd.add_argument("--model", default=None, help="Model name")
    config_cmd.add_argument("--api-key", default=None, help="API key for the provider")
    config_cmd.add_argument("--base-url", default=None, help="Provider root URL")
    config_cmd.add_argument("--show", action="store_true", help="Print the current settings")
    config_cmd.add_argument(
        "--test", action="store_true", help="Check that the AI provider answers"
    )
    config_cmd.add_argument(
        "--config", default=None, help="Config file (default: ~/.prism/config.json)"
    )
    config_cmd.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    return parser


def load_config(args: argparse.Namespace) -> Config:
    """Resolve file, environment and command-line settings, in that order.

    Raises:
        ConfigurationError: On an unreadable config file or invalid value.
    """
    config = Config.from_env(Config.load(Path(args.config) if args.config else None))
    analysis_update = {}
    if args.threshold is not None:
        if not 0.0 <= args.threshold <= 1.0:
            raise ConfigurationError(f"--threshold must be between 0 and 1, got {args.threshold}")
        analysis_update["ambiguity_threshold"] = args.threshold
    if args.style:
        analysis_update["pseudocode_style"] = args.style
    if getattr(args, "parallel", None) is not None:
        if args.parallel < 1:
            raise ConfigurationError(f"--parallel must be at least 1, got {args.parallel}")
        analysis_update["max_concurrency"] = args.parallel

    llm = config.llm.with_provider(args.provider) if args.provider else config.llm
    return config.model_copy(update={
        "llm": llm,
        "analysis": config.analysis.model_copy(update=analysis_update),
    })


def build_request(args: argparse.Namespace, config: Config) -> GenerationRequest:
    """Merge ``--preset`` and ``--generate`` into one request.

    Raises:
        ConfigurationError: For unknown artifacts or styles.
    """
    names = [*PRESET_ARTIFACTS.get(args.preset or "basic", ()), *args.generate.split(",")]
    request = GenerationRequest.parse(names, config.analysis.pseudocode_style)
    request.resolved_style()
    return request


def _capability(args: argparse.Namespace, config: Config) -> LlmClient | None:
    if not args.ai:
        return None
    if not config.llm.is_configured:
        print_warning(
            f"AI provider '{config.llm.provider}' is not configured; "
            "results will be marked degraded."
        )
    return LlmClient.from_config(config.llm)


# ---------------------------------------------------------------------------
# Output
# ---------------------------------------------------------------------------


def _artifact_filename(artifact: ArtifactType, request: GenerationRequest) -> str:
    name = ARTIFACT_FILENAMES[artifact]
    if artifact is ArtifactType.PSEUDO and request.resolved_style().value == "python":
        return "pseudocode.py"
    return name


def item_output_dir(out_dir: Path, root: Path, source: str) -> Path:
    """Per-file output directory mirroring *source* below *root*.

    The suffix is kept in the name, so ``x/story.md`` and ``x/story.txt``
    land in ``x/story_md`` and ``x/story_txt``.
    """
    relative = Path(source).relative_to(root)
    suffix = relative.suffix.lstrip(".")
    name = f"{relative.stem}_{suffix}" if suffix else relative.name
    return out_dir / relative.parent / name


async def write_outputs(
    result: AnalysisResult, request: GenerationRequest, directory: Path
) -> list[Path]:
    """Write ``analysis.json`` plus one file per artifact into *directory*."""
    written = [directory / "analysis.json"]
    await save_json(result.model_dump(mode="json"), written[0])
    for artifact, content in result.artifacts.items():
        path = directory / _artifact_filename(artifact, request)
        await asyncio.to_thread(path.write_text, content, "utf-8")
        written.append(path)
    return written


def print_result(result: AnalysisResult) -> None:
    """Render *result* as Rich tables followed by the generated artifacts."""
    print_section_header(f"Analysis: {escape(result.requirement.source)}")
    print_summary_table(analysis_summary(result))
    print_ambiguity_table(result)

    if result.completeness.gaps:
        table = Table(title="Completeness Gaps", show_header=True, header_style="bold cyan")
        table.add_column("Priority", no_wrap=True)
        table.add_column("Component")
        table.add_column("Description")
        for gap in result.completeness.gaps:
            table.add_row(gap.priority.value, escape(gap.category), escape(gap.description))
        console.print(table)
        console.print()

    for recommendation in result.story_validation.recommendations:
        console.print(f"  - {recommendation}", markup=False, highlight=False)

    if result.nfr_suggestions:
        table = Table(title="NFR Suggestions", show_header=True, header_style="bold cyan")
        table.add_column("Category", no_wrap=True)
        table.add_column("Priority", no_wrap=True)
        table.add_column("Requirement")
        for suggestion in result.nfr_suggestions:
            table.add_row(suggestion.category.value, suggestion.priority.value, escape(suggestion.requirement))
        console.print(table)
        console.print()

    for warning in result.warnings:
        print_warning(escape(warning))
    if result.degraded:
        print_warning("AI augmentation failed; showing rule-based findings only.")

    for artifact, content in result.artifacts.items():
        print_section_header(f"Artifact: {artifact.value}", color="bright_magenta")
        console.print(content, markup=False, highlight=False)


def print_batch_table(items: list[BatchItemResult]) -> None:
    table = Table(title="Batch Results", show_header=True, header_style="bold cyan")
    table.add_column("Source")
    table.add_column("Status", no_wrap=True)
    table.add_column("Ambiguities", justify="right")
    table.add_column("Completeness", justify="right")
    for item in items:
        if item.result is None:
            table.add_row(escape(item.source), "[red]failed[/red]", "-", escape(item.error or ""))
            continue
        status = "[yellow]degraded[/yellow]" if item.result.degraded else "[green]ok[/green]"
        table.add_row(
            escape(item.source),
            status,
            str(len(item.result.ambiguities)),
            f"{item.result.completeness.score:.0f}/100",
        )
    console.print(table)
    console.print()


def config_summary(config: Config, path: Path) -> dict[str, str]:
    """Settings for :func:`print_summary_table`, with the API key masked."""
    llm = config.llm
    return {
        "Config file": str(path),
        "Provider": llm.provider,
        "Model": llm.model or "-",
        "API key": "set" if llm.api_key else "not set",
        "Base URL": llm.resolved_base_url or "-",
        "Timeout": f"{llm.timeout}s",
        "Configured": "yes" if llm.is_configured else "no",
        "Ambiguity threshold": f"{config.analysis.ambiguity_threshold:g}",
        "Custom terms": ", ".join(config.analysis.custom_terms) or "-",
        "Max concurrency": str(config.analysis.max_concurrency),
        "Pseudocode style": config.analysis.pseudocode_style,
    }


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


def _read_input(args: argparse.Namespace) -> RequirementText:
    if args.text is not None:
        return RequirementText(text=args.text, source="inline")
    if args.file == "-":
        return RequirementText(text=sys.stdin.read(), source="stdin")
    return RequirementText(text=read_requirement_file(args.file), source=args.file)


async def run_analyze(args: argparse.Namespace, config: Config) -> int:
    request = build_request(args, config)
    if (args.text is None) == (args.file is None):
        print_error("Error: give either a requirement file ('-' for stdin) or --text")
        return 1
    try:
        requirement = _read_input(args)
    except (OSError, UnicodeDecodeError) as exc:
        print_error(f"Error: cannot read {escape(args.file)}: {escape(str(exc))}")
        return 1

    pipeline = RequirementPipeline(config.analysis)
    capability = _capability(args, config)
    result = await pipeline.analyze_async(
        requirement, request, capability, config.llm if capability else None
    )

    if args.json:
        sys.stdout.write(result.model_dump_json(indent=2) + "\n")
    else:
        print_result(result)

    if args.output:
        written = await write_outputs(result, request, Path(args.output))
        if not args.json:
            print_success(f"Wrote {len(written)} file(s) to {escape(args.output)}")
    return 0


async def run_batch(args: argparse.Namespace, config: Config) -> int:
    request = build_request(args, config)
    root = Path(args.directory)
    files = discover_requirement_files(root)
    if not files:
        print_error(f"Error: no requirement files found in {escape(args.directory)}")
        return 1

    # One slot per file; None marks a file still to be analysed.
    slots: list[BatchItemResult | None] = []
    requirements: list[RequirementText] = []
    for path in files:
        try:
            requirements.append(RequirementText(text=read_requirement_file(path), source=str(path)))
            slots.append(None)
        except (OSError, UnicodeDecodeError) as exc:
            slots.append(BatchItemResult(source=str(path), error=f"cannot read file: {exc}"))

    loop = asyncio.get_running_loop()
    started = loop.time()
    capability = _capability(args, config)
    if args.json:
        analysed = await analyze_batch(requirements, request, config, capability)
    else:
        with create_progress() as progress:
            task_id = progress.add_task("Analysing requirements", total=len(requirements))
            analysed = await analyze_batch(
                requirements, request, config, capability,
                on_item_done=lambda _item: progress.advance(task_id),
            )
    remaining = iter(analysed)
    items = [slot if slot is not None else next(remaining) for slot in slots]
    failed = sum(1 for item in items if not item.success)

    if args.output:
        out_dir = Path(args.output)
        for item in items:
            if item.result is not None:
                await write_outputs(item.result, request, item_output_dir(out_dir, root, item.source))
        await save_json([item.model_dump(mode="json") for item in items], out_dir / "batch-results.json")

    if args.json:
        payload = [item.model_dump(mode="json") for item in items]
        sys.stdout.write(_dump_json(payload) + "\n")
    else:
        print_batch_table(items)
        print_summary_table(
            {
                "Files analysed": str(len(items)),
                "Succeeded": str(len(items) - failed),
                "Failed": str(failed),
                "Duration": format_duration(loop.time() - started),
            },
            title="Batch Summary",
        )
        if failed:
            print_warning(f"{failed} file(s) failed. See the table above for details.")
    return 1 if failed else 0


async def run_config(args: argparse.Namespace) -> int:
    """Update, show and test the saved configuration.

    Setting options are saved first; ``--show`` and ``--test`` then act on
    the result. With no options at all the settings are shown.

    Raises:
        ConfigurationError: If the existing file is invalid.
    """
    path = Path(args.config) if args.config else Config.default_path()
    config = Config.load(path) if path.exists() else Config()

    llm_update = {
        key: value
        for key, value in (
            ("model", args.model), ("api_key", args.api_key), ("base_url", args.base_url)
        )
        if value is not None
    }
    if args.provider is not None or llm_update:
        llm = config.llm.model_copy(update=llm_update)
        if args.provider is not None:
            llm = llm.with_provider(args.provider)
        config = config.model_copy(update={"llm": llm})
        saved = await asyncio.to_thread(config.save, path)
        print_success(f"Saved configuration to {escape(str(saved))}")
    elif not args.test:
        args.show = True

    effective = Config.from_env(config)
    if args.show:
        print_summary_table(
            config_summary(effective, path),
            title="PRISM Configuration",
        )

    if args.test:
        llm = effective.llm
        if not llm.is_configured:
            print_error(f"Error: AI provider '{llm.provider}' is not configured")
            return 1
        if not await LlmClient.from_config(llm).is_available():
            print_error(
                f"Error: {llm.provider} is not reachable at {escape(llm.resolved_base_url)}"
            )
            return 1
        print_success(f"{llm.provider} is reachable at {escape(llm.resolved_base_url)}")
    return 0


def _dump_json(payload: object) -> str:
    return json.dumps(payload, indent=2, ensure_ascii=False)


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def main(argv: list[str] | None = None) -> int:
    """CLI entry point for ``prism`` and ``python -m prism``."""
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    try:
        if args.command == "config":
            return asyncio.run(run_config(args))
        config = load_config(args)
        if args.command == "analyze":
            return asyncio.run(run_analyze(args, config))
        return asyncio.run(run_batch(args, config))
    except ConfigurationError as exc:
        console.print(f"[bold red]Error:[/bold red] {escape(str(exc))}", highlight=False)
        return 1


if __name__ == "__main__":
    sys.exit(main())
