"""CLI commands - thin layer, delegates to services."""
import asyncio
import logging
import signal
from contextlib import suppress
from typing import List
import typer
from rich.console import Console
from rich.live import Live
from rich.table import Table
from .display import Display
from ..cancel import CancelToken
from ..config import KB, UploadOptions
from ..errors import Cancelled, ConfigError, PreparationError
from ..iterator import UnitIterator
from ..pipeline import Pipeline
from ..services import expr
from ..services.files import walk
from ..telegram import TelegramClient, TelegramSession
from ..worker import Transfer

# Silence noisy loggers
logging.basicConfig(level=logging.WARNING, format="%(message)s")
logging.getLogger("telethon").setLevel(logging.WARNING)
log = logging.getLogger(__name__)

app = typer.Typer(help="Upload local files to Telegram")
console = Console()


def _split(values: list[str]) -> list[str]:
    """Accept both repeated flags and comma separated lists."""
    return [v.strip() for value in values for v in value.split(",") if v.strip()]


@app.command()
def login(
    api_id: int = typer.Option(..., "--api-id", "-i", envvar="TG_API_ID"),
    api_hash: str = typer.Option(..., "--api-hash", "-h", envvar="TG_API_HASH"),
    phone: str = typer.Option(..., "--phone", "-p"),
):
    """Login to Telegram."""

    async def do_login():
        session = TelegramSession()
        session.save_credentials(api_id, api_hash)

        client = TelegramClient(api_id, api_hash)
        code_cb = lambda: typer.prompt("Code")
        pass_cb = lambda: typer.prompt("2FA Password", hide_input=True)

        try:
            if await client.login(phone, code_cb, pass_cb):
                console.print("[green]✓ Logged in[/green]")
            else:
                console.print("[red]Login failed[/red]")
        finally:
            await client.close()

    asyncio.run(do_login())


@app.command()
def logout():
    """Logout and delete session."""
    TelegramSession().delete()
    console.print("[green]✓ Logged out[/green]")


@app.command()
def status():
    """Check login status."""
    if TelegramSession().exists():
        console.print("[green]✓ Logged in[/green]")
    else:
        console.print("[yellow]Not logged in[/yellow]")


def _print_fields():
    table = Table("Field", "Description")
    for name, desc in expr.ENV_FIELDS.items():
        table.add_row(name, desc)
    console.print(table)


@app.command("up")
def upload(
    paths: List[str] = typer.Option([], "-p", "--path", help="Dirs or files"),
    includes: List[str] = typer.Option([], "-i", "--includes", help="Only upload these file extensions"),
    excludes: List[str] = typer.Option([], "-e", "--excludes", help="Skip these file extensions"),
    chat: str = typer.Option("", "-c", "--chat", help="Chat id or domain, empty means Saved Messages. Conflicts with --to"),
    topic: int = typer.Option(0, "--topic", help="Topic id, requires --chat"),
    to: str = typer.Option("", "--to", help="Routing expression returning a chat or {Peer, Thread}. Conflicts with --chat"),
    caption: str = typer.Option(expr.DEFAULT_CAPTION, "--caption", help="Caption expression"),
    remove: bool = typer.Option(False, "--rm", help="Remove files after they were sent"),
    photo: bool = typer.Option(False, "--photo", help="Send images as photos instead of files"),
    limit: int = typer.Option(2, "-l", "--limit", help="Max concurrent transfers"),
    delay: float = typer.Option(0.0, "--delay", help="Seconds to wait between dispatches"),
    part_size: int = typer.Option(512, "--part-size", help="Upload part size in KiB"),
    threads: int = typer.Option(4, "-t", "--threads", help="Parallel parts per file"),
    list_fields: bool = typer.Option(False, "--list-fields", help="Show the fields expressions can use"),
):
    """Upload files to Telegram."""
    if list_fields:
        _print_fields()
        return

    options = UploadOptions(
        paths=paths,
        includes=_split(includes),
        excludes=_split(excludes),
        chat=chat,
        topic=topic,
        to=to,
        caption=caption,
        remove=remove,
        photo=photo,
        limit=limit,
        delay=delay,
        part_size=part_size * KB,
        threads=threads,
    )

    try:
        options.validate()
        files = walk(options.paths, options.includes, options.excludes)
        router = expr.compile_expr(options.to) if options.to else None
        captioner = expr.compile_expr(options.caption)
    except ConfigError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    if not files:
        console.print("[yellow]No files to upload[/yellow]")
        return

    async def do_upload():
        api_id, api_hash = TelegramSession().load_credentials()
        if not api_id:
            console.print("[red]Not logged in. Run: tgpush login[/red]")
            raise typer.Exit(1)

        tg = TelegramClient(api_id, api_hash)
        if not await tg.start():
            await tg.close()
            console.print("[red]Session expired. Run: tgpush login[/red]")
            raise typer.Exit(1)

        token = CancelToken()
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            with suppress(NotImplementedError):
                loop.add_signal_handler(sig, token.cancel)

        iterator = UnitIterator(
            files, tg,
            to=router,
            caption=captioner,
            chat=options.chat,
            topic=options.topic,
            photo=options.photo,
            remove=options.remove,
        )
        display = Display(total=len(files))
        pipeline = Pipeline(
            iterator,
            Transfer(tg, options.part_size, options.threads),
            limit=options.limit,
            delay=options.delay,
            callbacks=display.callbacks(),
        )

        try:
            with Live(display, refresh_per_second=4, console=console):
                stats = await pipeline.run(token)
        except (Cancelled, PreparationError) as e:
            console.print(f"[red]{e}[/red]")
            raise typer.Exit(1)
        finally:
            await tg.close()

        console.print(f"\n[cyan]Done:[/cyan] {stats.uploaded} uploaded, {stats.failed} failed")

    asyncio.run(do_upload())


app.command("upload", hidden=True)(upload)


def main():
    app()


if __name__ == "__main__":
    main()
