import click
import logging
import traceback
from functools import wraps
from pathlib import Path

from .config import Config
from .builder import Builder, build_order, resolve_all, missing_variables, dump
from .utils import setup_logger, parse_module_levels
from .exceptions import (
    LSTDockerError,
    ConfigurationError,
    DefinitionError,
    BuildError,
)
from . import __version__


def complete_config_files(ctx, param, incomplete):
    """Auto-complete .yml and .yaml files in current directory"""
    cwd = Path.cwd()
    yml_files = list(cwd.glob('*.yml')) + list(cwd.glob('*.yaml'))
    return sorted(f.name for f in yml_files if f.name.startswith(incomplete))


def complete_services(ctx, param, incomplete):
    """Auto-complete service names from the selected document"""
    try:
        config = Config(ctx.params.get('config_file'))
    except LSTDockerError as e:
        logging.debug(f"Service auto-completion failed: {e}")
        return []
    return [name for name in config.services if name.startswith(incomplete)]


def handle_errors(func):
    """Decorator to handle common exceptions"""
    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except ConfigurationError as e:
            _report("Configuration error", e)
        except DefinitionError as e:
            _report("Definition error", e)
        except BuildError as e:
            _report("Build error", e)
        except LSTDockerError as e:
            _report("An unexpected application error occurred", e)
        except OSError as e:
            _report("A required file could not be read", e)
    return wrapper


def _report(prefix: str, error: Exception):
    logging.error(f"{prefix}: {error}")
    ctx = click.get_current_context()
    if ctx.obj and ctx.obj.get('debug'):
        traceback.print_exc()
    raise click.Abort()


config_option = click.option(
    '-f', '--file', 'config_file',
    shell_complete=complete_config_files,
    help='Build document (default: packaged libsovtoken document)',
)


@click.group(invoke_without_command=True)
@click.version_option(__version__, prog_name='lstdocker')
@click.option('--debug', is_flag=True, help='Enable debug logging')
@click.option('--log-levels', help="Per-module log levels, e.g. 'resolve=DEBUG,config=INFO'")
@click.option('--log-file', help='Path to log file')
@click.pass_context
def cli(ctx, debug, log_levels, log_file):
    """
    lstdocker - load and build the libsovtoken devops images

    \b
    Examples:
      lstdocker validate                 Check the packaged document
      lstdocker config -f compose.yml    Print the resolved document
      lstdocker build base ci            Build two images
    """
    ctx.ensure_object(dict)
    ctx.obj['debug'] = debug
    setup_logger(debug=debug, module_levels=parse_module_levels(log_levels) or None, log_file=log_file)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


@cli.command()
@config_option
@handle_errors
def validate(config_file):
    """Load the document and list its services"""
    config = Config(config_file)
    click.echo(f"version {config.version}")
    for name in config.services:
        click.echo(name)


@cli.command('config')
@config_option
@click.argument('services', nargs=-1, shell_complete=complete_services)
@handle_errors
def show_config(config_file, services):
    """Print the document with every variable substituted"""
    config = Config(config_file)
    resolved = resolve_all(config.document, services=services or None)
    click.echo(dump(resolved, config.version), nl=False)


@cli.command()
@config_option
@handle_errors
def check(config_file):
    """Report variables missing from the environment"""
    config = Config(config_file)
    report = missing_variables(config.document)
    if not report:
        click.echo("All variables resolved.")
        return
    for service, names in report.items():
        click.echo(f"{service}: {', '.join(names)}")
    raise click.exceptions.Exit(1)


@cli.command()
@config_option
@click.argument('services', nargs=-1, shell_complete=complete_services)
@handle_errors
def order(config_file, services):
    """Print the build order"""
    config = Config(config_file)
    for name in build_order(config.document, services or None):
        click.echo(name)


@cli.command()
@config_option
@click.argument('services', nargs=-1, shell_complete=complete_services)
@click.option('-w', '--workdir', help="Directory build contexts are relative to (default: document directory)")
@click.option('--dry-run', is_flag=True, help='Resolve and log without building')
@click.option('--pull', is_flag=True, help='Always pull newer base images')
@click.option('--no-cache', is_flag=True, help='Do not use the build cache')
@handle_errors
def build(config_file, services, workdir, dry_run, pull, no_cache):
    """Build images (all services by default)

    \b
    Examples:
      lstdocker build                    Build every image
      lstdocker build android_build      Build one image
      lstdocker build --dry-run          Show what would be built
    """
    config = Config(config_file)
    builder = Builder(config.document, workdir=workdir or config.workdir)
    built = builder.run(services or None, dry_run=dry_run, pull=pull, cache=not no_cache)
    for svc in built:
        click.echo(f"{svc.name}: {svc.image}")


if __name__ == '__main__':
    cli()
