"""Main CLI application using Typer."""
import asyncio
import logging

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from ..auth import DeviceTokenSource
from ..chats.models import Message, Role
from ..config import DEFAULT_CHAT_TITLE
from ..exceptions import AskAIError, SessionExpiredError
from ..session import SendStatus, Session, SessionController
from .providers import get_device, open_controller

# Load environment variables
load_dotenv()

app = typer.Typer(
    name="askai",
    help="Multi-conversation Ask AI chat client",
    no_args_is_help=True,
    add_completion=True,
)

console = Console()


@app.callback()
def main_callback(
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Show debug logging"
    )
):
    """Configure logging before any command runs."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


def _print_message(message: Message) -> None:
    if message.role == Role.USER:
        console.print(f"[bold yellow]You:[/bold yellow] {escape(message.content)}")
    else:
        console.print(f"[bold green]Assistant:[/bold green] {escape(message.content)}\n")


def _print_chats(session: Session) -> None:
    if not session.available:
        console.print("[yellow]Not logged in. Run: askai login[/yellow]")
        return
    if not session.chats:
        console.print("[dim]No conversations yet. Start a new chat![/dim]")
        return

    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("", width=1)
    table.add_column("ID", style="dim")
    table.add_column("Title")
    table.add_column("Created", style="dim")

    for chat in session.chats:
        marker = "*" if chat.id == session.active_chat_id else ""
        created = chat.created_at.strftime("%Y-%m-%d %H:%M") if chat.created_at else ""
        table.add_row(marker, chat.id, escape(chat.title), created)

    console.print(table)


def _run(coro) -> None:
    """Run a command coroutine, turning askai errors into exit code 1."""
    try:
        asyncio.run(coro)
    except AskAIError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(code=1)


@app.command()
def login(
    token: str = typer.Option(
        ...,
        "--token",
        "-t",
        prompt=True,
        hide_input=True,
        help="Access token issued by the auth service"
    ),
    refresh_token: str = typer.Option(
        None,
        "--refresh-token",
        help="Refresh token issued by the auth service"
    )
):
    """Save an access token on this device."""
    async def _login():
        device = get_device()
        await device.connect()
        try:
            await DeviceTokenSource(device).login(token, refresh_token)
        finally:
            await device.disconnect()
        console.print("[green]Logged in.[/green]")

    _run(_login())


@app.command()
def logout():
    """Forget the saved tokens. Local conversations stay on the device."""
    async def _logout():
        device = get_device()
        await device.connect()
        try:
            await DeviceTokenSource(device).logout()
        finally:
            await device.disconnect()
        console.print("[dim]Logged out.[/dim]")

    _run(_logout())


@app.command()
def chats():
    """List conversations, newest first."""
    async def _chats():
        async with open_controller(console) as controller:
            _print_chats(controller.session)

    _run(_chats())


@app.command()
def new(
    title: str = typer.Argument(DEFAULT_CHAT_TITLE, help="Chat title")
):
    """Start a new, empty conversation."""
    async def _new():
        async with open_controller(console) as controller:
            summary = await controller.new_chat(title)
            console.print(f"[green]Created chat {summary.id}[/green]")

    _run(_new())


@app.command()
def show(
    chat_id: str = typer.Argument(..., help="Chat ID")
):
    """Print a conversation."""
    async def _show():
        async with open_controller(console) as controller:
            session = await controller.select_chat(chat_id)
            console.print(f"[bold cyan]{escape(session.active_chat.title)}[/bold cyan]\n")
            for message in session.messages:
                _print_message(message)

    _run(_show())


@app.command()
def rename(
    chat_id: str = typer.Argument(..., help="Chat ID"),
    title: str = typer.Argument(..., help="New title")
):
    """Rename a conversation."""
    async def _rename():
        async with open_controller(console) as controller:
            await controller.rename_chat(chat_id, title)
            console.print("[green]Renamed.[/green]")

    _run(_rename())


@app.command()
def delete(
    chat_id: str = typer.Argument(..., help="Chat ID"),
    yes: bool = typer.Option(
        False,
        "--yes",
        "-y",
        help="Skip confirmation prompt"
    )
):
    """Delete a conversation and all its messages."""
    if not yes and not typer.confirm(f"Delete chat {chat_id}?"):
        console.print("[dim]Aborted.[/dim]")
        return

    async def _delete():
        async with open_controller(console) as controller:
            await controller.delete_chat(chat_id)
            console.print("[green]Deleted.[/green]")

    _run(_delete())


async def _send(controller: SessionController, text: str) -> None:
    with console.status("[dim]Thinking...[/dim]"):
        result = await controller.send(text)

    if result.status == SendStatus.UNAVAILABLE:
        console.print("[yellow]Not logged in. Run: askai login[/yellow]")
        return
    if not result.accepted:
        return

    console.print(f"[bold green]Assistant:[/bold green] {escape(result.reply.content)}\n")
    if any(isinstance(outcome.error, SessionExpiredError) for outcome in result.persisted):
        console.print("[yellow]Session expired, this exchange was not saved. Run: askai login[/yellow]")
    elif not result.fully_persisted:
        console.print("[yellow]Warning: part of this exchange was not saved[/yellow]")


@app.command()
def ask(
    text: str = typer.Argument(..., help="Message to send"),
    chat_id: str = typer.Option(
        None,
        "--chat",
        "-c",
        help="Send to this chat instead of the most recent one"
    ),
    new_chat: bool = typer.Option(
        False,
        "--new",
        "-n",
        help="Start a new chat for this message"
    )
):
    """Send one message and print the reply."""
    async def _ask():
        async with open_controller(console) as controller:
            if new_chat:
                await controller.new_chat()
            elif chat_id:
                await controller.select_chat(chat_id)
            await _send(controller, text)

    _run(_ask())


_CHAT_HELP = (
    "[dim]Commands: /new, /list, /switch ID, /delete ID, /quit[/dim]\n"
)


async def _handle_command(controller: SessionController, line: str) -> bool:
    """Run a slash command. Returns False when the loop should end."""
    command, _, argument = line.partition(" ")
    argument = argument.strip()

    if command in ("/quit", "/exit", "/q"):
        return False
    if command == "/new":
        summary = await controller.new_chat()
        console.print(f"[dim]Started chat {summary.id}[/dim]")
    elif command == "/list":
        _print_chats(controller.session)
    elif command == "/switch" and argument:
        session = await controller.select_chat(argument)
        for message in session.messages:
            _print_message(message)
    elif command == "/delete" and argument:
        await controller.delete_chat(argument)
        console.print(f"[dim]Deleted chat {argument}[/dim]")
    else:
        console.print(_CHAT_HELP)
    return True


@app.command()
def chat():
    """Interactive chat mode."""
    async def _chat():
        async with open_controller(console) as controller:
            if not controller.session.available:
                console.print("[yellow]Not logged in. Run: askai login[/yellow]")
                raise typer.Exit(code=1)

            console.print("[bold cyan]Ask AI[/bold cyan]")
            console.print(_CHAT_HELP)
            for message in controller.session.messages:
                _print_message(message)

            while True:
                try:
                    user_input = console.input("[bold yellow]You:[/bold yellow] ")
                except (KeyboardInterrupt, EOFError):
                    console.print("\n[dim]Goodbye![/dim]")
                    break

                if not user_input.strip():
                    continue

                if user_input.startswith("/"):
                    try:
                        if not await _handle_command(controller, user_input.strip()):
                            console.print("[dim]Goodbye![/dim]")
                            break
                    except AskAIError as e:
                        console.print(f"[red]Error: {escape(str(e))}[/red]")
                    continue

                await _send(controller, user_input)

    _run(_chat())


def main():
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
