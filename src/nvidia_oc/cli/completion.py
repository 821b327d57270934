"""Shell completion script generation."""

import click
from click.shell_completion import get_completion_class

PROG_NAME = "nvidia-oc"
COMPLETE_VAR = "_NVIDIA_OC_COMPLETE"


@click.command()
@click.argument("shell", type=click.Choice(["bash", "zsh", "fish"]))
@click.pass_context
def completion(ctx: click.Context, shell: str) -> None:
    """Generate shell completion script.

    \b
    # bash
    nvidia-oc completion bash > ~/.local/share/bash-completion/completions/nvidia-oc
    """
    completion_cls = get_completion_class(shell)
    script = completion_cls(ctx.find_root().command, {}, PROG_NAME, COMPLETE_VAR).source()
    click.echo(script)


__all__ = ["completion"]
