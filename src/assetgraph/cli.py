"""
AssetGraph CLI — Command-line interface for asset graph analysis.

Commands:
  subs   — List discovered names, addresses and the ASN summary
  track  — Show names discovered since a point in time
  viz    — Export the asset graph for visualization
  serve  — Start the REST API
"""

import logging
import sys
from datetime import datetime

try:
    import click
except ImportError:
    print("Click is required: pip install click")
    sys.exit(1)

from . import __version__
from .config import acquire_config, read_list_file, resolve_database
from .errors import AssetGraphError
from .store.memory import MemoryStore
from .store.model import to_utc

TIME_FORMAT = "%m/%d %H:%M:%S %Y %Z"
TIME_FORMAT_HELP = "01/02 15:04:05 2006 UTC"

log = logging.getLogger(__name__)


def _fail(message: str):
    click.secho(message, fg="red", err=True)
    sys.exit(1)


def scope_options(f):
    """Options shared by every command that works on a set of root domains."""
    decorators = [
        click.option("--domain", "-d", "domains", multiple=True,
                     help="Root domain names, comma separated (repeatable)"),
        click.option("--df", "domain_file", type=click.Path(exists=True, dir_okay=False),
                     default=None, help="File providing root domain names"),
        click.option("--config", "config_file", default=None,
                     help="Path to the YAML configuration file"),
        click.option("--dir", "directory", default=None,
                     help="Directory containing the asset graph"),
        click.option("--nocolor", is_flag=True, help="Disable colorized output"),
    ]
    for decorator in reversed(decorators):
        f = decorator(f)
    return f


def _load_scope(domains, domain_file, config_file, directory):
    """Collect the root domains and open the asset graph."""
    names = []
    for value in domains:
        names.extend(d.strip().lower() for d in value.split(",") if d.strip())

    try:
        if domain_file:
            names.extend(read_list_file(domain_file))
        cfg = acquire_config(directory, config_file)
    except AssetGraphError as e:
        _fail(str(e))

    if cfg is not None and not names:
        names.extend(cfg.domains)

    path = resolve_database(directory, cfg)
    log.debug("Opening asset graph %s", path)
    try:
        store = MemoryStore.load(path)
    except AssetGraphError as e:
        _fail(f"Failed to connect with the database: {e}")

    return list(dict.fromkeys(names)), store


def _parse_since(value):
    if not value:
        return None
    try:
        return to_utc(datetime.strptime(value, TIME_FORMAT))
    except ValueError:
        _fail(f"{value} is not in the correct format: {TIME_FORMAT_HELP}")


@click.group()
@click.version_option(version=__version__, prog_name="assetgraph")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.option("--silent", is_flag=True, help="Disable all output during execution")
@click.pass_context
def cli(ctx, verbose, silent):
    """AssetGraph — attack surface asset graph analysis."""
    level = logging.DEBUG if verbose else logging.WARNING
    if silent:
        level = logging.ERROR
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    ctx.ensure_object(dict)
    ctx.obj["silent"] = silent


@cli.command()
@scope_options
@click.option("--ip", "ips", is_flag=True, help="Show the IP addresses for discovered names")
@click.option("--ipv4", is_flag=True, help="Show the IPv4 addresses for discovered names")
@click.option("--ipv6", is_flag=True, help="Show the IPv6 addresses for discovered names")
@click.option("--demo", is_flag=True, help="Censor output to make it suitable for demonstrations")
@click.option("--summary", is_flag=True, help="Print just the ASN table summary")
@click.option("--names", is_flag=True, help="Print just the discovered names")
@click.option("--show", is_flag=True, help="Print the discovered names and the ASN table")
@click.option("--output", "-o", default=None, help="Write the results to a text file")
@click.pass_context
def subs(ctx, domains, domain_file, config_file, directory, nocolor,
         ips, ipv4, ipv6, demo, summary, names, show, output):
    """List discovered names, their addresses and the ASN summary."""
    from .analysis.names import discovered_names
    from .format import format_enumeration_summary, output_line_parts

    if show:
        names = summary = True
    if not names and not summary:
        click.echo(ctx.get_help(), err=True)
        return
    if ips:
        ipv4 = ipv6 = True
    if summary and not (ipv4 or ipv6):
        ipv4 = ipv6 = True

    scope, store = _load_scope(domains, domain_file, config_file, directory)
    records, asns = discovered_names(scope, store, ipv4=ipv4, ipv6=ipv6)

    silent = ctx.obj.get("silent", False)
    color = not nocolor
    lines = []

    if names:
        for record in records:
            name, addrs = output_line_parts(
                record.name, [a.ip for a in record.addresses], demo
            )
            if output:
                lines.append(f"{name} {addrs}".rstrip())
            elif not silent:
                click.echo(
                    f"{click.style(name, fg='green') if color else name} "
                    f"{click.style(addrs, fg='yellow') if color else addrs}".rstrip()
                )

    if summary:
        table = format_enumeration_summary(
            len(records), asns, demo=demo, color=color and not output
        )
        if output:
            lines.append(table)
        elif not silent:
            click.echo(table, err=show, nl=False)

    if output:
        with open(output, "w") as f:
            f.write("\n".join(lines) + "\n")


@cli.command()
@scope_options
@click.option("--since", default=None,
              help=f"Exclude all assets discovered before (format: {TIME_FORMAT_HELP})")
@click.pass_context
def track(ctx, domains, domain_file, config_file, directory, nocolor, since):
    """Show names discovered since a point in time."""
    from .analysis.delta import new_names

    cutoff = _parse_since(since)
    scope, store = _load_scope(domains, domain_file, config_file, directory)
    if not scope:
        _fail("No root domain names were provided")

    if ctx.obj.get("silent", False):
        return
    for name in new_names(scope, store, cutoff):
        click.echo(name if nocolor else click.style(name, fg="green"))


@cli.command()
@scope_options
@click.option("--since", default=None,
              help=f"Exclude all assets discovered before (format: {TIME_FORMAT_HELP})")
@click.option("--format", "-f", "fmt", type=click.Choice(["html", "d3", "gexf"]), default="html")
@click.option("--output", "-o", default="assetgraph", help="Output filename (without extension)")
@click.pass_context
def viz(ctx, domains, domain_file, config_file, directory, nocolor, since, fmt, output):
    """Export the asset graph reachable from the root domains."""
    from .graph.traversal import to_networkx, viz_data
    from .viz.export import D3Exporter, GEXFExporter, HTMLExporter

    cutoff = _parse_since(since)
    scope, store = _load_scope(domains, domain_file, config_file, directory)
    if not scope:
        _fail("No root domain names were provided")

    nodes, edges = viz_data(scope, cutoff, store)
    G = to_networkx(nodes, edges)

    if fmt == "html":
        filepath = f"{output}.html"
        HTMLExporter.save(filepath, G, title="AssetGraph: " + ", ".join(scope))
    elif fmt == "d3":
        filepath = f"{output}.json"
        D3Exporter.save(filepath, G)
    elif fmt == "gexf":
        filepath = f"{output}.gexf"
        GEXFExporter.save(filepath, G)

    if not ctx.obj.get("silent", False):
        click.echo(f"Exported {len(nodes)} nodes and {len(edges)} edges to {filepath}")


@cli.command()
@click.option("--config", "config_file", default=None, help="Path to the YAML configuration file")
@click.option("--dir", "directory", default=None, help="Directory containing the asset graph")
@click.option("--host", default="127.0.0.1", help="API host")
@click.option("--port", "-p", default=5000, help="API port")
def serve(config_file, directory, host, port):
    """Start the REST API."""
    from .api.routes import AssetGraphAPI

    try:
        cfg = acquire_config(directory, config_file)
        store = MemoryStore.load(resolve_database(directory, cfg))
    except AssetGraphError as e:
        _fail(str(e))

    click.echo(f"Loaded asset graph: {len(store)} assets")
    click.echo(f"Starting AssetGraph API on {host}:{port}")
    AssetGraphAPI(store).create_app().run(host=host, port=port)


def main():
    cli(obj={})


if __name__ == "__main__":
    main()
