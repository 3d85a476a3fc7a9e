"""
Command Line Interface for CodeChunker.

Developer tooling around the chunking engine: inspect how a file is
chunked, list the registered grammars, and benchmark a source tree.

Commands:
    - chunk: Chunk one file and print its chunks and symbols
    - languages: List registered languages, aliases and boundary kinds
    - benchmark: Chunk every matching file in a directory and time it

Example Usage:
    $ codechunker chunk src/math.cpp
    $ codechunker chunk legacy.pm --max-chunk-size 800 --json
    $ codechunker languages
    $ codechunker benchmark ~/projects/engine -p "*.cpp" -p "*.h"

Author: CodeChunker Team
"""

import json
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from .config import get_config
from .exceptions import UnsupportedLanguageError
from .logging import get_logger, log_operation_end, log_operation_start, setup_logging
from .parsers.grammars import get_language_for_file, is_language_supported, list_grammars
from .services.chunking import ChunkingService

console = Console()
logger = get_logger(__name__)


@click.group()
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default=None,
    help="Logging verbosity (defaults to LOG_LEVEL or WARNING)",
)
@click.pass_context
def main(ctx, log_level):
    """CodeChunker - Syntax-aware code chunking.

    Splits source files along function, class and namespace boundaries,
    bounds chunk size, adds overlap, and extracts C/C++ symbol metadata.

    \b
    Quick Start:
        # See how a file is chunked
        codechunker chunk src/math.cpp

        # Which languages are parsed structurally?
        codechunker languages
    """
    ctx.ensure_object(dict)

    if log_level:
        setup_logging(log_level=log_level, force=True)


@main.command()
@click.argument("file_path", type=click.Path(exists=True, dir_okay=False))
@click.option("--language", "-l", help="Language override (detected from the extension by default)")
@click.option("--max-chunk-size", type=int, default=None, help="Maximum characters per chunk")
@click.option("--overlap-size", type=int, default=None, help="Characters of overlap between chunks")
@click.option("--json", "as_json", is_flag=True, help="Print chunks as JSON")
@click.option("--strict", is_flag=True, help="Fail instead of falling back for unsupported languages")
def chunk(file_path, language, max_chunk_size, overlap_size, as_json, strict):
    """Chunk a single file.

    FILE_PATH: Path to the source file to chunk
    """
    path = Path(file_path)
    language = language or get_language_for_file(str(path)) or path.suffix.lstrip(".").lower()

    if strict and not is_language_supported(language):
        raise click.ClickException(str(UnsupportedLanguageError(language or path.name)))

    config = get_config().chunking.model_copy()
    try:
        if max_chunk_size is not None:
            config.max_chunk_size = max_chunk_size
        if overlap_size is not None:
            config.overlap_size = overlap_size
    except ValueError as e:
        raise click.BadParameter(str(e)) from e

    chunks = ChunkingService(config).chunk_file(path, language=language or None)

    if as_json:
        payload = [chunk.model_dump(mode="json", exclude_none=True) for chunk in chunks]
        click.echo(json.dumps(payload, indent=2))
        return

    console.print(f"\n[bold]{path}[/bold] ({language or 'text'}): {len(chunks)} chunks\n")

    table = Table()
    table.add_column("#", style="dim", justify="right")
    table.add_column("Lines", style="cyan")
    table.add_column("Kind", style="magenta")
    table.add_column("Chars", justify="right")
    table.add_column("Symbols", style="green")

    for idx, code_chunk in enumerate(chunks, 1):
        symbols = ", ".join(
            f"{symbol.kind.value} {symbol.get_qualified_name()}" for symbol in code_chunk.symbols
        )
        table.add_row(
            str(idx),
            f"{code_chunk.start_line}-{code_chunk.end_line}",
            code_chunk.node_kind or "[dim]text[/dim]",
            str(len(code_chunk.content)),
            symbols or "[dim]-[/dim]",
        )

    console.print(table)


@main.command()
def languages():
    """List languages chunked along syntax boundaries."""
    console.print("\n[bold]Registered Languages[/bold]\n")

    table = Table()
    table.add_column("Language", style="cyan")
    table.add_column("Aliases")
    table.add_column("Grammar", style="dim")
    table.add_column("Boundary Kinds")
    table.add_column("Symbols", justify="center")

    for spec in list_grammars():
        table.add_row(
            spec.language.value,
            ", ".join(spec.aliases) or "[dim]-[/dim]",
            spec.package,
            ", ".join(sorted(spec.boundary_kinds)),
            "✓" if spec.extractor is not None else "✗",
        )

    console.print(table)
    console.print("\n[dim]Other languages are chunked by the text fallback splitter[/dim]")


@main.command()
@click.argument("directory", type=click.Path(exists=True, file_okay=False))
@click.option(
    "--pattern", "-p",
    multiple=True,
    help="Glob for files to include (e.g., -p '*.cpp' -p '*.h'); defaults to all registered extensions"
)
def benchmark(directory, pattern):
    """Chunk every matching file in a directory and report timings.

    DIRECTORY: Root of the source tree to benchmark
    """
    root = Path(directory)
    files = _find_files(root, pattern)

    if not files:
        console.print("[yellow]No matching files found[/yellow]")
        return

    service = ChunkingService()
    table = Table()
    table.add_column("File", style="cyan")
    table.add_column("Lines", justify="right")
    table.add_column("Chunks", justify="right")
    table.add_column("Symbols", justify="right")
    table.add_column("Time (ms)", justify="right", style="green")

    total_lines = total_chunks = total_symbols = 0
    total_seconds = 0.0

    for file_path in files:
        relative_path = str(file_path.relative_to(root))
        start_time = log_operation_start(logger, "Chunking", path=relative_path)
        try:
            chunks = service.chunk_file(file_path)
        except OSError as e:
            log_operation_end(logger, "Chunking", start_time, success=False, path=relative_path)
            console.print(f"[yellow]Warning: Failed to read {file_path}: {e}[/yellow]")
            continue
        seconds = log_operation_end(
            logger, "Chunking", start_time, path=relative_path, chunks=len(chunks)
        )

        line_count = max((c.end_line for c in chunks), default=0)
        symbol_count = sum(len(c.symbols) for c in chunks)
        table.add_row(
            relative_path,
            str(line_count),
            str(len(chunks)),
            str(symbol_count),
            f"{seconds * 1000:.1f}",
        )

        total_lines += line_count
        total_chunks += len(chunks)
        total_symbols += symbol_count
        total_seconds += seconds

    console.print(table)
    console.print(
        f"\n[green]Processed {len(files)} files, {total_lines} lines: "
        f"{total_chunks} chunks, {total_symbols} symbols in {total_seconds * 1000:.1f} ms[/green]"
    )


def _find_files(root: Path, patterns: tuple[str, ...]) -> list[Path]:
    """Files under ``root`` matching any pattern, or any registered extension."""
    if patterns:
        matches = {path for pattern in patterns for path in root.rglob(pattern)}
    else:
        matches = {path for path in root.rglob("*") if get_language_for_file(str(path))}
    return sorted(path for path in matches if path.is_file())


if __name__ == "__main__":
    main()
