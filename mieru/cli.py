"""Click CLI with scan, graph, pages, and serve subcommands."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import click

from mieru import __version__
from mieru.analysis import RelationshipAnalyzer
from mieru.errors import ConfigError, MieruError
from mieru.export import extraction_summary, graph_to_dict, pages_to_dict, relationships_to_dict
from mieru.models import AnalyzerConfig, FrameworkHint, PageComponent, PageStructure
from mieru.pipeline import run_analysis, run_graph, run_scan

_DIR = click.Path(exists=True, file_okay=False, path_type=Path)


def load_framework_hint(path: Path) -> FrameworkHint:
    """Read a framework hint JSON file: {"name", "version", "confidence", ...}."""
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigError(f"Cannot read framework hint {path}: {e}") from e
    if not isinstance(data, dict) or not isinstance(data.get("name"), str):
        raise ConfigError(f"Framework hint {path} must be an object with a 'name'")
    try:
        confidence = int(data.get("confidence", 0))
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Framework hint confidence must be a number: {e}") from e
    return FrameworkHint(
        name=data["name"],
        version=data.get("version"),
        confidence=max(0, min(100, confidence)),
        page_patterns=list(data.get("page_patterns", [])),
        component_patterns=list(data.get("component_patterns", [])),
    )


def _progress(verbose: bool):
    if not verbose:
        return None

    def progress(stage: str, current: int, total: int):
        if total > 0:
            click.echo(f"  {stage}: {current}/{total}", err=True, nl=(current == total))
        else:
            click.echo(f"  {stage}...", err=True)
    return progress


@click.group()
@click.version_option(version=__version__)
@click.option("--verbose", "-v", is_flag=True, help="Debug logging and progress output")
@click.pass_context
def cli(ctx: click.Context, verbose: bool):
    """mieru: Map the pages, components and dependencies of a frontend codebase."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose


@cli.command()
@click.argument("project_dir", type=_DIR, default=".")
@click.option("--include-hidden", is_flag=True, help="Include dot-files and dot-directories")
@click.option("--max-depth", type=int, default=None, help="Maximum directory depth")
def scan(project_dir: Path, include_hidden: bool, max_depth: int | None):
    """List the source files the analyzers would read."""
    config = AnalyzerConfig(project_dir=project_dir, include_hidden=include_hidden, max_scan_depth=max_depth)
    try:
        result = run_scan(config)
    except MieruError as e:
        raise click.ClickException(str(e))

    if not result.files:
        click.echo("No source files found.")
        return

    click.echo(f"\nFound {result.total_files} file(s) in {result.project_path}:\n")
    by_ext: dict[str, int] = {}
    for f in result.files:
        by_ext[f.extension] = by_ext.get(f.extension, 0) + 1
        click.echo(f"  {f.relative_path}  {click.style(f'{f.size}B', dim=True)}")

    click.echo("\nSummary:")
    for ext, count in sorted(by_ext.items()):
        click.echo(f"  {ext}: {count}")
    for error in result.errors:
        click.echo(click.style(f"  ! {error}", fg="red"))


@cli.command()
@click.argument("project_dir", type=_DIR, default=".")
@click.option("--json", "as_json", is_flag=True, help="Print the graph as JSON")
@click.option("--no-cycles", is_flag=True, help="Skip circular dependency detection")
@click.option("--top", type=int, default=10, help="How many nodes to rank")
@click.pass_context
def graph(ctx: click.Context, project_dir: Path, as_json: bool, no_cycles: bool, top: int):
    """Build the dependency graph and report cycles, depth and hot spots."""
    config = AnalyzerConfig(project_dir=project_dir, detect_circular=not no_cycles, top_n=top)
    try:
        result = run_graph(config, progress=_progress(ctx.obj["verbose"]))
    except MieruError as e:
        raise click.ClickException(str(e))

    dep_graph = result.graph
    analyzer = RelationshipAnalyzer()
    most_depended = analyzer.most_depended(dep_graph, config.top_n)
    most_depending = analyzer.most_depending(dep_graph, config.top_n)
    clusters = analyzer.detect_clusters(dep_graph, config.min_cluster_size)

    if as_json:
        payload = {
            "extraction": extraction_summary(result.extraction),
            "graph": graph_to_dict(dep_graph),
            "ranking": relationships_to_dict([], analyzer.relationship_stats([]),
                                             most_depended, most_depending, clusters),
        }
        click.echo(json.dumps(payload, indent=2))
        return

    ext = result.extraction
    stats = dep_graph.stats
    click.echo(f"\nParsed {ext.success_count} of {ext.total_files} file(s) successfully")
    for record in ext.results:
        for error in record.errors:
            click.echo(click.style(f"  ! {record.relative_path}: {error}", fg="red"))

    click.echo(
        f"\nNodes: {stats.total_nodes}  Edges: {stats.total_edges}  "
        f"Isolated: {stats.isolated_nodes}  Max depth: {stats.max_depth}"
    )

    relative = {key: node.relative_path for key, node in dep_graph.nodes.items()}
    if dep_graph.circular_dependencies:
        click.echo(click.style(f"\nCircular dependencies ({stats.circular_count}):", fg="yellow"))
        for circular in dep_graph.circular_dependencies:
            click.echo("  " + " -> ".join(relative.get(p, p) for p in circular.cycle))

    click.echo("\nMost depended on:")
    for ranked in most_depended:
        if ranked.count:
            click.echo(f"  {ranked.count:>4}  {ranked.node.relative_path}")

    click.echo("\nMost dependencies:")
    for ranked in most_depending:
        if ranked.count:
            click.echo(f"  {ranked.count:>4}  {ranked.node.relative_path}")

    if clusters:
        click.echo(f"\nClusters ({len(clusters)}):")
        for cluster in clusters:
            click.echo(f"  {len(cluster)} files: " + ", ".join(relative.get(p, p) for p in cluster[:5])
                       + (" ..." if len(cluster) > 5 else ""))


@cli.command()
@click.argument("project_dir", type=_DIR, default=".")
@click.option("--max-depth", type=int, default=3, help="Component expansion depth")
@click.option("--shared-tracking", is_flag=True, help="Expand each component file once across all pages")
@click.option("--framework-hint", "hint_file", type=click.Path(exists=True, dir_okay=False, path_type=Path),
              help="JSON file with a framework detection hint")
@click.option("--json", "as_json", is_flag=True, help="Print the page structure as JSON")
@click.pass_context
def pages(
    ctx: click.Context,
    project_dir: Path,
    max_depth: int,
    shared_tracking: bool,
    hint_file: Path | None,
    as_json: bool,
):
    """Resolve pages, routes and their component trees."""
    try:
        hint = load_framework_hint(hint_file) if hint_file else None
        config = AnalyzerConfig(
            project_dir=project_dir,
            max_expansion_depth=max_depth,
            shared_tracking=shared_tracking,
            framework_hint=hint,
        )
        result = run_analysis(config, progress=_progress(ctx.obj["verbose"]))
    except MieruError as e:
        raise click.ClickException(str(e))

    structure = result.pages
    if as_json:
        click.echo(json.dumps(pages_to_dict(structure), indent=2))
        return
    _print_pages(structure)


def _print_pages(structure: PageStructure) -> None:
    click.echo(f"\nProject flavor: {structure.flavor.value}")
    if structure.entry_point:
        click.echo(f"Entry point: {structure.entry_point}")
    click.echo(f"Pages: {structure.stats.total_pages}  Links: {structure.stats.total_links}\n")

    for page in structure.pages.values():
        click.echo(
            f"{click.style(page.route, fg='cyan')}  {page.name}  "
            f"{click.style(page.relative_path, dim=True)}"
        )
        for line in _component_tree(page.components):
            click.echo(line)

    if structure.connections:
        click.echo("\nConnections:")
        for conn in structure.connections:
            source = structure.pages[conn.source]
            target = structure.pages[conn.target]
            click.echo(f"  {source.route} -> {target.route}  ({conn.kind.value}, x{conn.weight})")


def _component_tree(components: list[PageComponent]) -> list[str]:
    lines: list[str] = []
    seen: set[int] = set()

    def walk(comp: PageComponent) -> None:
        if id(comp) in seen:
            return
        seen.add(id(comp))
        depth = comp.depth or 0
        lines.append(f"  {'  ' * depth}- {comp.name}")
        for child in components:
            if child.parent == comp.name and child.depth == depth + 1:
                walk(child)

    for comp in components:
        if not comp.depth:
            walk(comp)
    return lines


@cli.command()
@click.option("--port", "-p", default=8421, help="Port number")
@click.option("--host", default="127.0.0.1", help="Host address")
def serve(port: int, host: str):
    """Start the HTTP API."""
    try:
        import uvicorn
    except ImportError:
        raise click.ClickException(
            "uvicorn is required for the API server. Install with: pip install uvicorn"
        )

    from mieru.web import create_app

    click.echo(f"Starting mieru API at http://{host}:{port}")
    uvicorn.run(create_app(), host=host, port=port, log_level="info")


if __name__ == "__main__":
    cli()
