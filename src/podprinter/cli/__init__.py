import logging
import sys

from typing import List
from typing_extensions import Annotated

import typer.core

typer.core.rich = None

import typer  # noqa: E402


app = typer.Typer(add_completion=False)


@app.callback()
def main(
    ctx: typer.Context,
    verbose: Annotated[bool, typer.Option('--verbose', '-v')] = False,
    debug: Annotated[bool, typer.Option('--debug', '-d')] = False,
) -> None:
    """
    podprinter, the Hello operator.
    """
    ctx.obj = {}

    logging.basicConfig(
        level=logging.ERROR,
        format='%(levelname)s: %(module)s: %(message)s',
        stream=sys.stderr,
    )
    log = logging.getLogger('podprinter')
    log_level = logging.ERROR
    if verbose:
        log_level = logging.INFO
    elif debug:
        log_level = logging.DEBUG
    log.setLevel(log_level)
    ctx.obj['log_level'] = log_level
    ctx.obj['debug'] = debug


@app.command(name='run', short_help='Run the operator.')
def run(
    ctx: typer.Context,
    all_namespaces: Annotated[
        bool,
        typer.Option(
            '--all-namespaces',
            envvar='PODPRINTER_ALL_NAMESPACES',
            help='Watch all namespaces.',
        ),
    ] = False,
    namespaces: Annotated[
        List[str],
        typer.Option(
            '--namespace',
            envvar='PODPRINTER_NAMESPACES',
            help='Watch the given namespaces instead of the default. Can be given multiple times.',
        ),
    ] = None,
    field_manager: Annotated[
        str,
        typer.Option(
            '--field-manager',
            envvar='PODPRINTER_FIELD_MANAGER',
            help='Field manager name used for writes to the api server.',
        ),
    ] = 'podprinter',
) -> None:
    # Importing the operator registers its controller.
    import podprinter.hello  # noqa: F401
    from podprinter import manager

    manager.run(
        all_namespaces=all_namespaces,
        namespaces=namespaces,
        field_manager=field_manager,
        debug=ctx.obj['debug'],
    )


@app.command(name='crd', short_help='Print the CustomResourceDefinitions as yaml.')
def crd(ctx: typer.Context) -> None:
    import podprinter.hello  # noqa: F401
    from podprinter import resources

    typer.echo(resources.resources_to_yaml(*resources.all_crds()), nl=False)


@app.command(name='rbac', short_help='Print the ClusterRole the operator needs as yaml.')
def rbac(ctx: typer.Context) -> None:
    import podprinter.hello  # noqa: F401
    from podprinter import resources
    from podprinter.rbac import rbac_registry

    typer.echo(resources.resources_to_yaml(rbac_registry.cluster_role()), nl=False)


if __name__ == '__main__':
    app()
