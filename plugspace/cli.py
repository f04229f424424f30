"""CLI interface for plugspace."""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

import click
from jinja2 import TemplateError
from rich.console import Console
from rich.table import Table

from plugspace import __version__
from plugspace.config import Config
from plugspace.plugins import PluginRegistry, load_plugin

console = Console()
err_console = Console(stderr=True)

# Debug logger
debug_logger = None
debug_log_file = None


def setup_debug_logger(log_path: Optional[Path] = None) -> logging.Logger:
    """Setup debug logger for detailed logging."""
    global debug_logger, debug_log_file

    if log_path is None:
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        log_path = Path(f"plugspace_debug_{timestamp}.log")

    debug_log_file = log_path

    # Library modules log under the package logger
    logger = logging.getLogger("plugspace")
    logger.setLevel(logging.DEBUG)

    # Clear existing handlers
    logger.handlers = []

    # File handler
    fh = logging.FileHandler(log_path, encoding='utf-8')
    fh.setLevel(logging.DEBUG)

    # Detailed format
    formatter = logging.Formatter(
        '%(asctime)s | %(levelname)-8s | %(name)s | %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )
    fh.setFormatter(formatter)
    logger.addHandler(fh)

    debug_logger = logger
    return logger


def debug_log(level: str, message: str, data: dict = None):
    """Log debug message with optional structured data."""
    global debug_logger
    if debug_logger is None:
        return

    log_func = getattr(debug_logger, level.lower(), debug_logger.info)

    if data:
        data_str = json.dumps(data, ensure_ascii=False, indent=2, default=str)
        log_func(f"{message}\n{data_str}")
    else:
        log_func(message)


def _parse_assignment(text: str, option: str) -> tuple[str, str]:
    """Split ``KEY=VALUE`` from a command-line option."""
    key, sep, value = text.partition("=")
    if not sep or not key:
        raise click.BadParameter(f"Expected KEY=VALUE, got {text!r}", param_hint=option)
    return key.strip(), value


def build_registry(config: Config, plugin_options: tuple[str, ...] = ()) -> PluginRegistry:
    """Mount the plugins named in config and on the command line."""
    plugins = dict(config.plugins)
    for option in plugin_options:
        prefix, reference = _parse_assignment(option, "--plugin")
        plugins[prefix] = reference

    registry = PluginRegistry()
    for prefix, reference in plugins.items():
        registry.mount(load_plugin(reference), prefix)
    return registry


@click.group()
@click.version_option(version=__version__)
def main():
    """Plugspace - prefixed namespaces for Jinja2 template plugins."""
    pass


@main.command()
@click.argument("template_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("-p", "--plugin", "plugin_options", multiple=True, help="Mount a plugin as PREFIX=module:ClassName")
@click.option("-e", "--enable", "enabled", multiple=True, help="Enable tags of a prefix (default: all mounted)")
@click.option("--var", "variables", multiple=True, help="Template variable as KEY=VALUE")
@click.option("-o", "--output", "output_path", type=click.Path(path_type=Path), help="Output file path")
@click.option("--autoescape", is_flag=True, help="Enable autoescaping")
@click.option("--strict", is_flag=True, help="Fail on undefined variables")
@click.option("--debug", is_flag=True, help="Enable debug logging to file")
@click.option("--debug-file", type=click.Path(path_type=Path), help="Debug log file path (default: plugspace_debug_TIMESTAMP.log)")
def render(
    template_path: Path,
    plugin_options: tuple[str, ...],
    enabled: tuple[str, ...],
    variables: tuple[str, ...],
    output_path: Optional[Path],
    autoescape: bool,
    strict: bool,
    debug: bool,
    debug_file: Optional[Path],
):
    """Render a template with prefixed plugin filters and tags.

    Plugins come from PLUGSPACE_PLUGINS and --plugin. Tags of plugins that
    are not enabled render their disabled fallback.
    """
    config = Config()
    if autoescape:
        config.autoescape = True
    if strict:
        config.strict_undefined = True

    debug_file = debug_file or config.debug_log
    if debug or debug_file:
        setup_debug_logger(debug_file)
        err_console.print(f"[yellow]Debug logging enabled: {debug_log_file}[/yellow]")
        debug_log("info", "Debug logging started", {
            "template_path": str(template_path),
            "plugins": list(plugin_options),
            "enabled": list(enabled),
        })

    try:
        registry = build_registry(config, plugin_options)
        template_vars = dict(_parse_assignment(item, "--var") for item in variables)
        enabled_prefixes = list(enabled) or config.enabled

        environment = registry.create_environment(config)
        source = template_path.read_text(encoding="utf-8")
        output = registry.render(environment, source, enabled_prefixes, **template_vars)
    except (ImportError, AttributeError, KeyError, ValueError, TypeError, TemplateError) as e:
        debug_log("error", "Render failed", {"error": repr(e)})
        err_console.print(f"[red]Error: {e}[/red]")
        raise SystemExit(1)

    debug_log("info", "Render complete", {"mounted": registry.prefixes, "chars": len(output)})

    if output_path:
        output_path.write_text(output, encoding="utf-8")
        console.print(f"[green]Rendered to: {output_path}[/green]")
    else:
        click.echo(output, nl=False)


@main.command()
@click.option("-p", "--plugin", "plugin_options", multiple=True, help="Mount a plugin as PREFIX=module:ClassName")
def inspect(plugin_options: tuple[str, ...]):
    """Show the prefixed filters and tags of the mounted plugins."""
    try:
        registry = build_registry(Config(), plugin_options)
    except (ImportError, AttributeError, ValueError, TypeError) as e:
        err_console.print(f"[red]Error: {e}[/red]")
        raise SystemExit(1)

    if not registry.mounts:
        console.print("[yellow]No plugins mounted[/yellow]")
        return

    table = Table(title="Mounted Plugins")
    table.add_column("Prefix")
    table.add_column("Plugin")
    table.add_column("Filters")
    table.add_column("Tags")

    for prefix, mounted in registry.mounts.items():
        table.add_row(
            prefix,
            mounted.plugin.name,
            ", ".join(mounted.filter_module.filter_names()) or "-",
            ", ".join(mounted.tags) or "-",
        )

    console.print(table)


if __name__ == "__main__":
    main()
