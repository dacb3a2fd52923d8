"""tfind - regex search across directory trees.

Thin command line wrapper over treefind.find, match_found and
get_array_of_capturing_group.
"""

import asyncio
import json
import logging
import time
from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape
from rich.status import Status

from . import __version__
from .errors import TreefindError
from .finder import find, find_sync, get_array_of_capturing_group, match_found
from .patterns import Flagged, Plain, PatternSpec

# Consoles
console = Console()
err_console = Console(stderr=True)

# Exit codes
EXIT_MATCH = 0
EXIT_NO_MATCH = 1
EXIT_ERROR = 2

app = typer.Typer(
    name="tfind",
    help="Regex search across directory trees",
    no_args_is_help=True,
    add_completion=False,
)


def build_pattern(term: str, flags: str | None = None, ignore_case: bool = False) -> PatternSpec:
    """Build a pattern spec from CLI options."""
    if ignore_case and flags is None:
        flags = "gi"
    elif ignore_case and "i" not in flags:
        flags += "i"
    if flags is None:
        return Plain(term)
    return Flagged(term, flags)


def filter_results(results: dict[str, dict], root: Path, exclude: list[str] | None) -> dict:
    """Drop files matching gitwildmatch exclude patterns (relative to root)."""
    import pathspec

    if not exclude:
        return results

    exclude_spec = pathspec.PathSpec.from_lines("gitwildmatch", exclude)
    return {
        f: r for f, r in results.items() if not exclude_spec.match_file(relative_to(f, root))
    }


def relative_to(file_path: str, root: Path) -> str:
    try:
        return str(Path(file_path).absolute().relative_to(root))
    except ValueError:
        return file_path


def print_results(
    results: dict[str, dict],
    root: Path,
    json_output: bool = False,
    files_only: bool = False,
    show_lines: bool = True,
) -> None:
    """Print search results."""
    files = sorted(results)

    if files_only:
        if json_output:
            print(json.dumps([relative_to(f, root) for f in files]))
        else:
            for f in files:
                console.print(f"[cyan]{escape(relative_to(f, root))}[/]")
        return

    if json_output:
        print(json.dumps({relative_to(f, root): results[f] for f in files}, indent=2))
        return

    for f in files:
        r = results[f]
        console.print(f"[cyan]{escape(relative_to(f, root))}[/]:[yellow]{r['count']}[/]")
        if show_lines and r["line"]:
            for line in r["line"]:
                # Truncate long lines
                if len(line) > 120:
                    line = line[:117] + "..."
                console.print(f"  [dim]{escape(line)}[/]")


def setup_logging(verbose: bool) -> None:
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")


def version_callback(value: bool) -> None:
    if value:
        console.print(f"tfind {__version__}")
        raise typer.Exit()


@app.callback()
def root_options(
    version: bool = typer.Option(
        False, "--version", callback=version_callback, is_eager=True, help="Show version"
    ),
):
    """Regex search across directory trees."""


@app.command()
def search(
    pattern: str = typer.Argument(..., help="Regex pattern"),
    path: Path = typer.Argument(Path("."), help="Directory to search"),
    file_filter: str = typer.Option(None, "-F", "--filter", help="File name regex"),
    flags: str = typer.Option(None, "--flags", help="Regex flags (g, i, m, s)"),
    ignore_case: bool = typer.Option(False, "-i", "--ignore-case", help="Ignore case"),
    exclude: list[str] = typer.Option(None, "--exclude", help="Exclude glob pattern"),
    jobs: int = typer.Option(None, "-j", "--jobs", help="Max concurrent file reads"),
    sync: bool = typer.Option(False, "--sync", help="List files with a blocking walk"),
    json_output: bool = typer.Option(False, "--json", help="JSON output"),
    files_only: bool = typer.Option(False, "-l", "--files-only", help="List files only"),
    no_lines: bool = typer.Option(False, "--no-lines", help="Only print match counts"),
    quiet: bool = typer.Option(False, "-q", "--quiet", help="Suppress progress"),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Debug logging"),
):
    """Search every file under PATH for PATTERN."""
    setup_logging(verbose)
    spec = build_pattern(pattern, flags, ignore_case)
    runner = find_sync if sync else find

    try:
        t0 = time.perf_counter()
        if quiet:
            results = asyncio.run(runner(spec, path, file_filter, max_concurrency=jobs))
        else:
            with Status(f"Searching for: {pattern}...", console=err_console):
                results = asyncio.run(runner(spec, path, file_filter, max_concurrency=jobs))
        search_time = time.perf_counter() - t0
    except (TreefindError, ValueError) as e:
        err_console.print(f"[red]Error:[/] {escape(str(e))}")
        raise typer.Exit(EXIT_ERROR)

    root = path.absolute()
    results = filter_results(results, root, exclude)

    if not results:
        if not json_output and not quiet:
            err_console.print("[dim]No matches found[/]")
        raise typer.Exit(EXIT_NO_MATCH)

    print_results(results, root, json_output, files_only, show_lines=not no_lines)

    if not quiet and not json_output and not files_only:
        total = sum(r["count"] for r in results.values())
        err_console.print(
            f"[dim]{total} matches in {len(results)} files ({search_time:.2f}s)[/]"
        )

    raise typer.Exit(EXIT_MATCH)


@app.command()
def exists(
    pattern: str = typer.Argument(..., help="Regex pattern"),
    paths: list[Path] = typer.Argument(..., help="Directories to search"),
    file_filter: str = typer.Option(None, "-F", "--filter", help="File name regex"),
    flags: str = typer.Option(None, "--flags", help="Regex flags (g, i, m, s)"),
    ignore_case: bool = typer.Option(False, "-i", "--ignore-case", help="Ignore case"),
    quiet: bool = typer.Option(False, "-q", "--quiet", help="No output, exit code only"),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Debug logging"),
):
    """Exit 0 if any file under PATHS matches PATTERN, 1 otherwise."""
    setup_logging(verbose)
    spec = build_pattern(pattern, flags, ignore_case)

    try:
        found = match_found(spec, paths, file_filter)
    except (TreefindError, ValueError) as e:
        err_console.print(f"[red]Error:[/] {escape(str(e))}")
        raise typer.Exit(EXIT_ERROR)

    if not quiet:
        console.print("[green]found[/]" if found else "[dim]not found[/]")
    raise typer.Exit(EXIT_MATCH if found else EXIT_NO_MATCH)


@app.command()
def captures(
    pattern: str = typer.Argument(..., help="Regex pattern with a capturing group"),
    paths: list[Path] = typer.Argument(..., help="Directories to search"),
    file_filter: str = typer.Option(None, "-F", "--filter", help="File name regex"),
    flags: str = typer.Option(None, "--flags", help="Regex flags (g, i, m, s)"),
    ignore_case: bool = typer.Option(False, "-i", "--ignore-case", help="Ignore case"),
    json_output: bool = typer.Option(False, "--json", help="JSON output"),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Debug logging"),
):
    """Print the distinct first capture group values of PATTERN under PATHS."""
    setup_logging(verbose)
    spec = build_pattern(pattern, flags, ignore_case)

    try:
        values = sorted(get_array_of_capturing_group(spec, paths, file_filter))
    except (TreefindError, ValueError) as e:
        err_console.print(f"[red]Error:[/] {escape(str(e))}")
        raise typer.Exit(EXIT_ERROR)

    if json_output:
        print(json.dumps(values))
    else:
        for value in values:
            console.print(escape(value), highlight=False)

    raise typer.Exit(EXIT_MATCH if values else EXIT_NO_MATCH)


def main():
    """Entry point."""
    app()


if __name__ == "__main__":
    main()
