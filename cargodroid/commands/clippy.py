import click
from .build import cargo_options, run_cargo_command
from ..decorators import handle_exceptions


@click.command(context_settings={"ignore_unknown_options": True})
@cargo_options
@click.pass_context
@handle_exceptions
def clippy(ctx, **options):
    """Lint the Rust library with `cargo clippy` for each target."""
    run_cargo_command(ctx, "clippy", **options)
