"""CLI entry point using Click."""

from __future__ import annotations

import logging
from pathlib import Path

import click

_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class _DefaultGroup(click.Group):
    """Insert 'run' when the first arg is not a registered subcommand."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.no_args_is_help = False  # bare `tui-syntree` also routes to run

    def invoke(self, ctx):
        # No args left after group options: run the editor
        if not ctx._protected_args and not ctx.args:
            ctx._protected_args = ["run"]
        return super().invoke(ctx)

    def resolve_command(self, ctx, args):
        cmd_name = args[0] if args else None
        if cmd_name and cmd_name in self.commands:
            return super().resolve_command(ctx, args)
        return super().resolve_command(ctx, ["run"] + list(args))


def _configure_logging(log_file: str | None, level: str) -> None:
    # The terminal belongs to the TUI, so logs only go to a file.
    if log_file is None:
        logging.getLogger("tui_syntree").addHandler(logging.NullHandler())
        return
    logging.basicConfig(filename=log_file, level=level.upper(), format=_LOG_FORMAT)


@click.group(cls=_DefaultGroup)
@click.option("--no-color", is_flag=True, help="Disable color output")
@click.option("--demo", is_flag=True, help="Launch with an example sentence and tree")
@click.option("--log-file", type=click.Path(dir_okay=False), default=None,
              help="Write debug logs to this file")
@click.option(
    "--log-level",
    type=click.Choice(["debug", "info", "warning", "error"], case_sensitive=False),
    default="info",
    show_default=True,
    help="Log level for --log-file",
)
@click.version_option(package_name="tui-syntree")
@click.pass_context
def main(ctx, no_color: bool, demo: bool, log_file: str | None, log_level: str) -> None:
    """TUI Syntree - Terminal UI syntax tree editor."""
    ctx.ensure_object(dict)
    ctx.obj["no_color"] = no_color
    ctx.obj["demo"] = demo
    _configure_logging(log_file, log_level)


@main.command()
@click.argument("path", default=".", type=click.Path())
@click.option("--sentence", default=None, help="Sentence to start with")
@click.pass_context
def run(ctx, path: str, sentence: str | None) -> None:
    """Opens the tree editor. Settings are read from PATH/.tui-syntree/."""
    from tui_syntree.app import SyntreeApp

    no_color = ctx.obj["no_color"]
    demo = ctx.obj["demo"]

    project_dir = Path(path).resolve()
    if not project_dir.exists():
        click.echo(f"Error: '{project_dir}' does not exist.", err=True)
        raise SystemExit(1)
    if not project_dir.is_dir():
        click.echo(f"Error: '{project_dir}' is not a directory.", err=True)
        raise SystemExit(1)

    app = SyntreeApp(
        project_dir=project_dir,
        sentence=sentence,
        demo_mode=demo,
        no_color=no_color,
    )
    app.run()


@main.command("init")
@click.argument("path", default=".", type=click.Path())
@click.option("--sentence", default="", help="Default sentence for new sessions")
def init_cmd(path: str, sentence: str) -> None:
    """Initialize a project folder with .tui-syntree/config.toml."""
    from tui_syntree.config import config_path, save_config
    from tui_syntree.models import EditorConfig

    project_dir = Path(path).resolve()
    target = config_path(project_dir)
    if target.exists():
        click.echo(f"Config already exists: {target}", err=True)
        raise SystemExit(1)

    project_dir.mkdir(parents=True, exist_ok=True)
    save_config(project_dir, EditorConfig(sentence=sentence))
    click.echo(f"Created {target}")
    click.echo("Run 'tui-syntree' to open the editor.")
