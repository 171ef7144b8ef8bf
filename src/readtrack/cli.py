"""Command-line interface for readtrack.

Built with Typer for commands and Rich for output.
"""

from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from . import __version__
from .config import get_config
from .db import get_db
from .db.schemas import ProgressUpdate, ReadingItemCreate
from .discovery.recommendations import RecommendationGateway
from .errors import ReadTrackError
from .library.registry import ItemRegistry
from .logging_config import setup_logging
from .reading.progress import ProgressTracker
from .stats.analytics import ReadingStatsService
from .streaks.manager import StreakTracker
from .users.manager import UserManager
from .users.schemas import UserCreate

# Create the main app
app = typer.Typer(
    name="readtrack",
    help="Track your reading progress, streaks and notes.",
    no_args_is_help=True,
)

# Rich console for pretty output
console = Console()


# ============================================================================
# Helper Functions
# ============================================================================


def print_error(message: str) -> None:
    """Print an error message."""
    console.print(f"[bold red]Error:[/bold red] {message}")


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[bold green]Success:[/bold green] {message}")


def print_warning(message: str) -> None:
    """Print a warning message."""
    console.print(f"[bold yellow]Warning:[/bold yellow] {message}")


def fail(error: ReadTrackError) -> None:
    """Report a readtrack error and exit non-zero."""
    print_error(error.message)
    raise typer.Exit(1)


# ============================================================================
# Commands
# ============================================================================


@app.command()
def version() -> None:
    """Show the readtrack version."""
    console.print(f"readtrack {__version__}")


@app.command("init-db")
def init_db() -> None:
    """Create the database tables."""
    config = get_config()
    for problem in config.validate():
        print_warning(problem)
    get_db(str(config.db_path))
    print_success(f"Database ready at {config.db_path}")


@app.command()
def serve(
    host: Optional[str] = typer.Option(None, "--host", help="Interface to bind"),
    port: Optional[int] = typer.Option(None, "--port", "-p", help="Port to listen on"),
    debug: bool = typer.Option(False, "--debug", help="Enable Flask debug mode"),
) -> None:
    """Run the JSON API server."""
    from .web.app import run_server

    config = get_config()
    setup_logging("DEBUG" if debug else config.log_level)
    run_server(host=host or config.host, port=port or config.port, debug=debug)


@app.command("add-user")
def add_user(
    email: str = typer.Argument(..., help="Email address"),
    name: Optional[str] = typer.Option(None, "--name", "-n", help="Display name"),
) -> None:
    """Register a user and print their id."""
    try:
        user = UserManager(get_db()).register(UserCreate(email=email, name=name))
    except ReadTrackError as e:
        fail(e)
    except ValueError as e:
        print_error(str(e))
        raise typer.Exit(1)
    print_success(f"Registered {user.email}")
    console.print(f"User id: [cyan]{user.id}[/cyan]")


@app.command("add-book")
def add_book(
    user_id: str = typer.Option(..., "--user", "-u", help="User id"),
    title: str = typer.Argument(..., help="Book title"),
    author: Optional[str] = typer.Option(None, "--author", "-a", help="Author"),
    pages: Optional[int] = typer.Option(None, "--pages", help="Total pages"),
    topic: Optional[str] = typer.Option(None, "--topic", help="Topic"),
) -> None:
    """Add a book to a user's shelf."""
    try:
        db = get_db()
        UserManager(db).get_user(user_id)
        data = ReadingItemCreate(title=title, author=author, total_pages=pages, topic=topic)
        item = ItemRegistry(db).create_or_update_direct(user_id, data)
    except ReadTrackError as e:
        fail(e)
    except ValueError as e:
        print_error(str(e))
        raise typer.Exit(1)
    print_success(f"Added '{item.title}' ({item.total_pages} pages)")


@app.command()
def progress(
    user_id: str = typer.Option(..., "--user", "-u", help="User id"),
    title: str = typer.Argument(..., help="Book title"),
    page: int = typer.Argument(..., help="Page you are on now"),
    author: Optional[str] = typer.Option(None, "--author", "-a", help="Author"),
    pages: Optional[int] = typer.Option(None, "--pages", help="Total pages"),
) -> None:
    """Record reading progress for a book."""
    try:
        db = get_db()
        UserManager(db).get_user(user_id)
        update = ProgressUpdate(
            title=title, author=author, total_pages=pages, current_page_after=page
        )
        result = ProgressTracker(db).record_progress(user_id, update)
    except ReadTrackError as e:
        fail(e)
    except ValueError as e:
        print_error(str(e))
        raise typer.Exit(1)

    console.print(
        f"[cyan]{result.item.title}[/cyan]: page {result.item.current_page}"
        f" (+{result.pages_read} pages)"
    )


@app.command()
def books(user_id: str = typer.Option(..., "--user", "-u", help="User id")) -> None:
    """List a user's books with progress."""
    entries = ReadingStatsService(get_db()).get_item_progress(user_id)
    if not entries:
        console.print("[dim]No books yet.[/dim]")
        return

    table = Table(title="Books", show_header=True, header_style="bold magenta")
    table.add_column("Title", style="cyan", max_width=40)
    table.add_column("Author", style="green", max_width=25)
    table.add_column("Status", style="yellow")
    table.add_column("Pages", justify="right")
    table.add_column("Progress", justify="right")

    for entry in entries:
        table.add_row(
            entry.title,
            entry.author or "-",
            entry.status.value,
            f"{entry.current_page}/{entry.total_pages}",
            f"{entry.progress_percent}%",
        )
    console.print(table)


@app.command()
def stats(
    user_id: str = typer.Option(..., "--user", "-u", help="User id"),
    days: int = typer.Option(7, "--days", "-d", help="Days of daily history"),
) -> None:
    """Show library totals and recent daily pages."""
    service = ReadingStatsService(get_db())
    try:
        daily = service.get_daily_pages(user_id, days=days)
    except ReadTrackError as e:
        fail(e)
    summary = service.get_summary(user_id)

    console.print(f"Books: [bold]{summary.total_books}[/bold]")
    console.print(f"Pages: {summary.current_pages}/{summary.total_pages}")
    console.print(f"Overall progress: [bold green]{summary.overall_progress}%[/bold green]")

    table = Table(title=f"Last {days} days", show_header=True, header_style="bold magenta")
    table.add_column("Date")
    table.add_column("Pages", justify="right")
    for day, pages in daily.days:
        table.add_row(day.isoformat(), str(pages))
    console.print(table)


@app.command()
def ping(user_id: str = typer.Option(..., "--user", "-u", help="User id")) -> None:
    """Register activity for today and show the streak."""
    try:
        result = StreakTracker(get_db()).ping(user_id)
    except ReadTrackError as e:
        fail(e)
    console.print(f"Streak: [bold green]{result.streak_days}[/bold green] day(s)")


@app.command()
def discover(query: str = typer.Argument(..., help="What you want to read about")) -> None:
    """Ask the AI service for book suggestions."""
    try:
        result = RecommendationGateway().search_books(query)
    except ReadTrackError as e:
        fail(e)

    if not result.books:
        print_warning("No books could be parsed from the answer.")
        if result.raw_text:
            console.print(result.raw_text, markup=False)
        return

    table = Table(title=f"Books for '{query}'", show_header=True, header_style="bold magenta")
    table.add_column("Title", style="cyan", max_width=40)
    table.add_column("Author", style="green", max_width=25)
    table.add_column("Category")
    table.add_column("Rating", justify="center")
    table.add_column("Pages", justify="right")
    for book in result.books:
        table.add_row(book.title, book.author, book.category, f"{book.rating:.1f}", str(book.total_pages))
    console.print(table)


if __name__ == "__main__":
    app()
