"""
Command-line interface for schedule_bot.

Run with: python -m schedule_bot
"""

import asyncio
from datetime import datetime, timedelta

import typer
from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel
from rich.prompt import Prompt, Confirm
from rich.table import Table

from . import __version__
from .bot import NO_SLOTS_SUGGESTIONS, SchedulingBot
from .calendar_tools import calendar_check_conflicts, calendar_list_events_today
from .config import settings
from .extraction import MalformedRequestError
from .formatting import format_day, format_slot, format_time
from .logging_config import configure_logging
from .models import ScheduleResult

app = typer.Typer(
    name="schedule_bot",
    help="Books recurring activity sessions into your Google Calendar",
    add_completion=False,
)
console = Console()

DEMO_REQUESTS = [
    "I want to practice guitar 3 times a week after dinner",
    "I need to study for my exam 5 times this week, deadline is Friday, this is urgent!",
    "Help me schedule yoga sessions twice a week in the mornings",
]


@app.callback()
def _setup():
    configure_logging(log_level=settings.log_level)


def _create_bot(provider: str | None, model: str | None) -> SchedulingBot:
    """Apply provider overrides and build the bot, exiting on missing keys."""
    if provider:
        settings.llm_provider = provider
    if model:
        if settings.llm_provider == "ollama":
            settings.ollama_model = model
        else:
            settings.model_name = model

    try:
        settings.get_api_key()
        return SchedulingBot()
    except ValueError as e:
        console.print(f"\n[red]Error: {e}[/red]")
        console.print(f"\nTo use {settings.llm_provider}, add the API key to your .env file.")
        raise typer.Exit(1)


def _show_result(result: ScheduleResult) -> None:
    if not result.scheduled_times:
        console.print("[red]❌ No conflict-free times found! Try:[/red]")
        for suggestion in NO_SLOTS_SUGGESTIONS:
            console.print(f"   - {suggestion}")
        return

    console.print(Panel(
        Markdown(result.explanation),
        title="[bold blue]🎯 Your conflict-free schedule[/bold blue]",
        border_style="blue",
    ))

    table = Table(title=f"{result.activity_name} ({result.request.duration_minutes} min)")
    table.add_column("#", justify="right")
    table.add_column("Day")
    table.add_column("Time")
    for i, slot in enumerate(result.scheduled_times, 1):
        table.add_row(str(i), format_day(slot), format_time(slot))
    console.print(table)

    if not result.is_complete:
        console.print(
            f"[yellow]⚠️  Only found {len(result.scheduled_times)} of "
            f"{result.request.frequency} requested sessions.[/yellow]"
        )


def _run_request(bot: SchedulingBot, text: str, add: bool | None) -> ScheduleResult | None:
    try:
        with console.status("[bold blue]Checking your calendar...[/bold blue]"):
            result = asyncio.run(bot.schedule(text))
    except MalformedRequestError as e:
        console.print(f"[red]❌ {e}. Try rephrasing your request.[/red]")
        return None

    _show_result(result)
    if not result.scheduled_times:
        return result

    if add is None:
        add = Confirm.ask("\n📅 Add these to your Google Calendar?", default=False)
    if add:
        outcome = bot.add_to_calendar(result)
        if outcome["failed"]:
            console.print(f"[red]❌ {len(outcome['failed'])} event(s) could not be created.[/red]")
        console.print(f"[green]🎉 {outcome['message']}[/green]")
    return result


@app.command()
def schedule(
    message: str = typer.Option(
        None,
        "--message", "-m",
        help="Single request to schedule (non-interactive mode)",
    ),
    provider: str = typer.Option(
        None,
        "--provider", "-p",
        help="LLM provider override (anthropic, openai, gemini, ollama)",
    ),
    model: str = typer.Option(
        None,
        "--model",
        help="Model name override",
    ),
    add: bool = typer.Option(
        None,
        "--add/--no-add",
        help="Add the sessions to Google Calendar without asking",
    ),
):
    """
    Schedule an activity, e.g. "practice guitar 3 times a week in the evening".

    Examples:
        python -m schedule_bot schedule
        python -m schedule_bot schedule -m "yoga twice a week, mornings" --no-add
    """
    bot = _create_bot(provider, model)

    if message:
        _run_request(bot, message, add)
        return

    console.print(Panel.fit(
        "[bold blue]Personal Scheduling Assistant[/bold blue]\n"
        "Try things like:\n"
        '  • "I want to practice guitar 3 times a week"\n'
        '  • "I need to study for my exam, deadline Friday, this is urgent"\n'
        '  • "Help me schedule cooking practice twice a week in the evenings"',
        title="🤖 Welcome",
    ))
    console.print("\n[dim]Type 'quit' to exit.[/dim]\n")

    while True:
        try:
            user_input = Prompt.ask("[bold green]📝 What would you like to schedule?[/bold green]")
        except (KeyboardInterrupt, EOFError):
            console.print("\n[dim]Goodbye![/dim]")
            break

        if user_input.lower() in ("quit", "exit", "stop"):
            console.print("[dim]👋 Thanks for using the scheduling assistant![/dim]")
            break

        if not user_input.strip():
            console.print("Please enter a scheduling request.")
            continue

        result = _run_request(bot, user_input, add)
        if result and result.scheduled_times:
            if not Confirm.ask("😊 Happy with this schedule?", default=True):
                console.print("Let's try again! Be more specific about:")
                console.print("- Preferred times (morning/afternoon/evening)")
                console.print("- How long each session should be")
                console.print("- Any deadlines or urgency")
                continue
            if not Confirm.ask("Would you like to schedule something else?", default=False):
                console.print("[dim]👋 Have a productive day![/dim]")
                break

        console.print()


@app.command()
def demo(
    provider: str = typer.Option(None, "--provider", "-p", help="LLM provider override"),
    model: str = typer.Option(None, "--model", help="Model name override"),
):
    """Run a few sample requests without adding any events."""
    bot = _create_bot(provider, model)

    for i, request in enumerate(DEMO_REQUESTS, 1):
        console.rule(f"TEST {i}: {request}")
        _run_request(bot, request, add=False)


@app.command(name="check-calendar")
def check_calendar():
    """Probe the conflict check one hour from now and list today's events."""
    probe_time = datetime.now() + timedelta(hours=1)
    console.print(f"Testing conflict detection at: [cyan]{format_slot(probe_time)}[/cyan]")

    result = calendar_check_conflicts(probe_time, 60)
    if "error" in result:
        console.print(f"[red]Error: {result['error']}[/red]")
        raise typer.Exit(1)
    console.print(f"Conflict detected: [bold]{result['conflict']}[/bold]")

    today = calendar_list_events_today()
    if "error" in today:
        console.print(f"[red]Error listing events: {today['error']}[/red]")
        raise typer.Exit(1)

    console.print("\n[bold]📅 Your events today:[/bold]")
    if not today["events"]:
        console.print("[dim]No events found for today[/dim]")
    for event in today["events"]:
        console.print(f"  • {event['title']} - {event['start']}")


@app.command(name="calendar-setup")
def calendar_setup():
    """Authorize schedule_bot to read and book events in your Google Calendar.

    Needs a Desktop-app OAuth client (credentials.json) with the Calendar API
    enabled. The resulting token is reused by every conflict check.
    """
    from google_auth_oauthlib.flow import InstalledAppFlow

    from .calendar_tools import SCOPES

    creds_file = settings.google_calendar_credentials_file
    token_file = settings.google_calendar_token_file

    if not creds_file.exists():
        console.print(f"[red]No OAuth client file at {creds_file.resolve()}[/red]")
        console.print(
            "Create a Desktop-app OAuth client for the Google Calendar API, save its JSON "
            "there (or point GOOGLE_CALENDAR_CREDENTIALS_FILE at it) and run this again."
        )
        raise typer.Exit(1)

    console.print("[bold blue]Opening your browser to grant calendar access...[/bold blue]")
    try:
        flow = InstalledAppFlow.from_client_secrets_file(str(creds_file), SCOPES)
        creds = flow.run_local_server(port=0)
    except Exception as e:
        console.print(f"[red]Authorization failed: {e}[/red]")
        raise typer.Exit(1)

    token_file.write_text(creds.to_json())
    console.print(f"[green]✅ Calendar access saved to {token_file.resolve()}[/green]")
    console.print("[dim]Next: python -m schedule_bot check-calendar[/dim]")


@app.command()
def version():
    """Show version information."""
    console.print(f"schedule_bot v{__version__}")


def main():
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
