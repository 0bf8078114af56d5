import logging
from typing import Annotated

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from apiforge.codegen.codegen import Codegen
from apiforge.config import get_config
from apiforge.exceptions import ApiForgeError

console = Console()
err_console = Console(stderr=True)
app = typer.Typer(
    name='apiforge',
    help='Compile OpenAPI documents into server models and route scaffolding',
    no_args_is_help=True,
)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format='%(message)s',
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


@app.command()
def generate(
    source: Annotated[
        str, typer.Argument(help='Interface document (.json, .yaml or .yml)')
    ],
    target: Annotated[
        str | None,
        typer.Option('--target', '-t', help='Target backend (python or rust)'),
    ] = None,
    output: Annotated[
        str | None,
        typer.Option(
            '--output', '-o', help='Write files to this directory instead of stdout'
        ),
    ] = None,
    config: Annotated[
        str | None,
        typer.Option(
            '--config', '-c', help='Path to configuration file (YAML or JSON)'
        ),
    ] = None,
    no_routes: Annotated[
        bool, typer.Option('--no-routes', help='Only emit models and structs')
    ] = False,
    verbose: Annotated[
        bool, typer.Option('--verbose', '-v', help='Enable debug logging')
    ] = False,
) -> None:
    """Generate code from an interface document.

    Command line options override values from the configuration file.

    Examples:
        apiforge generate api.yaml
        apiforge generate api.json --target rust
        apiforge generate api.yaml -o ./generated -c apiforge.yaml
    """
    _configure_logging(verbose)

    try:
        settings = get_config(config)
        overrides = {}
        if target is not None:
            overrides['target'] = target
        if output is not None:
            overrides['output'] = output
        if no_routes:
            overrides['emit_routes'] = False
        settings = settings.model_copy(update=overrides)

        result = Codegen(source, settings).generate()
    except ApiForgeError as e:
        err_console.print(f'[red]Error:[/red] {escape(str(e))}', soft_wrap=True)
        raise typer.Exit(1)

    if isinstance(result, list):
        console.print('[dim]Generated files:[/dim]')
        for path in result:
            console.print(f'  - {escape(path)}', soft_wrap=True)
    else:
        typer.echo(result, nl=False)


@app.command()
def version() -> None:
    """Show the version of apiforge."""
    from apiforge import __version__

    console.print(f'apiforge version: {__version__}')


if __name__ == '__main__':
    app()
