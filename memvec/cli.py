"""
memvec CLI - Try similarity search over a text file from the command line.

Nothing is persisted: each invocation builds a fresh in-memory store.

Usage:
    memvec search notes.txt "where is the API key"
    memvec search notes.txt "dark mode" -k 3 --threshold 0.5
    memvec embedders
"""

import asyncio
import importlib.util
import logging
import sys
from pathlib import Path
from typing import List, Optional

import click

from .embedders import BACKEND_MODULES, create_embedder
from .similarity import SIMILARITY_FUNCTIONS, get_similarity
from .store import MemoryVectorStore


# ANSI color codes
class Colors:
    RESET = "\033[0m"
    BOLD = "\033[1m"
    DIM = "\033[2m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    CYAN = "\033[36m"
    RED = "\033[31m"


def color(text: str, color_code: str) -> str:
    """Apply color to text if terminal supports it."""
    if sys.stdout.isatty():
        return f"{color_code}{text}{Colors.RESET}"
    return text


def format_score(score: float) -> str:
    """Format similarity score with color."""
    if score >= 0.7:
        return color(f"{score:.3f}", Colors.GREEN)
    elif score >= 0.5:
        return color(f"{score:.3f}", Colors.YELLOW)
    else:
        return color(f"{score:.3f}", Colors.DIM)


def read_corpus(path: str) -> List[str]:
    """One fragment per non-blank line."""
    lines = Path(path).read_text(encoding="utf-8").splitlines()
    return [line.strip() for line in lines if line.strip()]


async def run_search(
    texts: List[str],
    query: str,
    k: int,
    threshold: Optional[float],
    similarity: str,
    embedder: Optional[str],
):
    store = await MemoryVectorStore.from_texts(
        texts,
        lambda i: {"line": i + 1},
        create_embedder(embedder),
        similarity=get_similarity(similarity),
    )
    if threshold is None:
        return await store.similarity_search_with_score(query, k=k)
    retriever = store.as_retriever(min_similarity_score=threshold, max_k=k)
    return await retriever.get_relevant_documents_with_score(query)


@click.group()
@click.version_option(version="0.1.0")
@click.option("--verbose", "-v", is_flag=True, help="Log to stderr")
def cli(verbose: bool):
    """
    memvec - In-memory vector search and semantic caching.

    \b
    Examples:
        memvec search notes.txt "configuration"
        memvec search notes.txt "settings" -k 10 -t 0.4
        memvec embedders
    """
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            stream=sys.stderr,
        )


@cli.command()
@click.argument("corpus", type=click.Path(exists=True, dir_okay=False))
@click.argument("query")
@click.option(
    "--results", "-k",
    default=5,
    help="Number of results (default: 5)"
)
@click.option(
    "--threshold", "-t",
    type=float,
    default=None,
    help="Drop hits scoring below this value"
)
@click.option(
    "--similarity", "-s",
    type=click.Choice(list(SIMILARITY_FUNCTIONS)),
    default="cosine",
    help="Similarity function (default: cosine)"
)
@click.option(
    "--embedder", "-e",
    default=None,
    help="Embedder backend: fastembed, sentence-transformers, openai (default: auto)"
)
def search(
    corpus: str,
    query: str,
    results: int,
    threshold: Optional[float],
    similarity: str,
    embedder: Optional[str],
):
    """
    Rank the lines of CORPUS by similarity to QUERY.

    \b
    Examples:
        memvec search notes.txt "user preferences"
        memvec search notes.txt "api key" -k 1 -t 0.8
    """
    try:
        texts = read_corpus(corpus)
        if not texts:
            click.echo(color(f"Error: {corpus} has no text", Colors.RED), err=True)
            sys.exit(1)

        hits = asyncio.run(run_search(texts, query, results, threshold, similarity, embedder))

        click.echo(f"\n{color('Query:', Colors.BOLD)} {color(query, Colors.CYAN)}")
        click.echo(f"{'=' * 50}\n")

        if not hits:
            click.echo(color("No matches found.", Colors.YELLOW))
            if threshold is not None:
                click.echo("Try a lower threshold with -t")
            return

        for i, (doc, score) in enumerate(hits, 1):
            line = doc.metadata.get("line", "?")
            click.echo(f"{color(str(i) + '.', Colors.BOLD)} (score: {format_score(score)}, line: {line})")

            content = doc.page_content
            if len(content) > 100:
                content = content[:100] + "..."
            click.echo(f"   {content}")
            click.echo()

        click.echo(color(f"Found {len(hits)} of {len(texts)} fragments", Colors.DIM))

    except Exception as e:
        click.echo(color(f"Error: {e}", Colors.RED), err=True)
        sys.exit(1)


@cli.command()
def embedders():
    """List embedder backends and whether they are installed."""
    for name, module in BACKEND_MODULES.items():
        if importlib.util.find_spec(module) is not None:
            status = color("installed", Colors.GREEN)
        else:
            status = color(f"missing (pip install {name})", Colors.DIM)
        click.echo(f"  {name:<22} {status}")


def main():
    """Entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
