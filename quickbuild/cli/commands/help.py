"""
Native Click implementation of the help command.

Usage: quickbuild help [COMMAND]
"""

import click


@click.command("help")
@click.argument("command", required=False)
@click.pass_context
def help_command(ctx: click.Context, command: str | None) -> None:
    """Show help for quickbuild or for one COMMAND."""
    root = ctx.find_root()
    if command is None:
        click.echo(root.get_help())
        return

    group = root.command
    cmd = group.get_command(root, command) if isinstance(group, click.Group) else None
    if cmd is None:
        raise click.UsageError(f"No such command '{command}'.", ctx=root)
    with click.Context(cmd, info_name=command, parent=root) as sub_ctx:
        click.echo(cmd.get_help(sub_ctx))
