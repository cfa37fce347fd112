import click
from .build import cargo_options, run_cargo_command
from ..decorators import handle_exceptions


@click.command(context_settings={"ignore_unknown_options": True})
@cargo_options
@click.pass_context
@handle_exceptions
def test(ctx, **options):
    """Run `cargo test` for each target.

    Android targets run through the adb runner script.
    """
    run_cargo_command(ctx, "test", **options)
