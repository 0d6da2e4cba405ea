"""CLI entrypoint: Typer app definition and command registration"""

import typer

from modcontent.cli.commands import (
    copy_published_cmd, history_cmd, init_cmd, publish_cmd, restore_cmd, save_draft_cmd, seed_cmd, show_cmd,
)


app = typer.Typer(name="modcontent", no_args_is_help=True, help="Audited draft/publish content for module sections")

app.command(name="init")(init_cmd)
app.command(name="save-draft")(save_draft_cmd)
app.command(name="publish")(publish_cmd)
app.command(name="copy-published")(copy_published_cmd)
app.command(name="restore")(restore_cmd)
app.command(name="history")(history_cmd)
app.command(name="show")(show_cmd)
app.command(name="seed")(seed_cmd)
