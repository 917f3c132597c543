"""Main entry point for the dircontacts application.

Sets up the Typer CLI application, performs dependency injection (Composition Root),
defines CLI commands, and delegates execution to the CommandHandler.
"""

import asyncio
import logging
from typing import Any, Coroutine, Dict, Optional

import typer
from typing_extensions import Annotated

# --- Core Layer ---
from dircontacts.core.command_handler import CommandHandler, EXIT_FAILURE
from dircontacts.core.services.batch_worker import BatchWorker
from dircontacts.core.services.contacts_service import ContactsService

# --- Domain Layer ---
from dircontacts.domain.errors import ContactsError
from dircontacts.domain.interfaces.directory import DirectoryClient
from dircontacts.domain.models.contacts import GroupID

# --- Infrastructure Layer ---
from dircontacts.infrastructure.cache.contact_store import ContactStore
from dircontacts.infrastructure.cli.display import ConsoleDisplay
from dircontacts.infrastructure.config.settings import (
    get_batch_size, get_config, get_fetch_timeout, get_group_id,
    get_max_concurrent_batches, get_max_members, get_quota_policy,
    get_request_pacing, get_sentinel, get_token_file, load_configuration,
)
from dircontacts.infrastructure.monitoring.logger_setup import setup_logging
from dircontacts.infrastructure.people.google_people_client import GooglePeopleDirectory
from dircontacts.infrastructure.resilience.rate_limiter import BatchRateLimiter

logger = logging.getLogger(__name__)

# --- Dependency Injection Container (Manual) ---

def create_dependencies(
    directory: Optional[DirectoryClient] = None,
    timeout_s: Optional[float] = None,
) -> Dict[str, Any]:
    """Creates and wires up all dependencies for the application.

    This acts as the Composition Root.

    Args:
        directory: Directory client to use; the Google People client is
            built from the configured token file if None.
        timeout_s: Overrides the configured fetch deadline.

    Raises:
        ContactsError: If configuration is invalid or the directory client
            cannot be created.
    """
    dependencies: Dict[str, Any] = {}

    # 1. Infrastructure Adapters & Services
    dependencies['ui'] = ConsoleDisplay()
    dependencies['store'] = ContactStore(sentinel=get_sentinel())
    dependencies['directory'] = directory or GooglePeopleDirectory.from_token_file(get_token_file())
    dependencies['rate_limiter'] = BatchRateLimiter(
        max_concurrent=get_max_concurrent_batches(),
        **get_request_pacing(),
    )

    # 2. Core Services
    dependencies['batch_worker'] = BatchWorker(
        directory=dependencies['directory'],
        retry_policy=get_quota_policy(),
        rate_limiter=dependencies['rate_limiter'],
    )
    dependencies['contacts_service'] = ContactsService(
        directory=dependencies['directory'],
        store=dependencies['store'],
        worker=dependencies['batch_worker'],
        group_id=GroupID(get_group_id()),
        max_members=get_max_members(),
        batch_size=get_batch_size(),
        timeout_s=timeout_s if timeout_s is not None else get_fetch_timeout(),
    )

    # 3. Command Handler
    dependencies['command_handler'] = CommandHandler(
        contacts_service=dependencies['contacts_service'],
        ui=dependencies['ui'],
    )
    logger.debug("All dependencies initialized successfully.")
    return dependencies

# --- Typer App Definition ---
app = typer.Typer(
    name="dircontacts",
    help="Load every contact of a directory group as display email addresses.",
    add_completion=False,
)


def run_async(coro: Coroutine[Any, Any, int]) -> None:
    """Runs a command coroutine and exits with the code it returns."""
    exit_code = asyncio.run(coro)
    if exit_code:
        raise typer.Exit(code=exit_code)


def _handler(timeout: Optional[float]) -> CommandHandler:
    try:
        return create_dependencies(timeout_s=timeout)['command_handler']
    except ContactsError as e:
        logger.error(f"Application initialization failed: {e}", exc_info=True)
        ConsoleDisplay().display_error(f"Application initialization failed: {e}")
        raise typer.Exit(code=EXIT_FAILURE)

# --- CLI Commands ---

TimeoutOption = Annotated[
    Optional[float],
    typer.Option("--timeout", "-t", min=0, help="Give up if loading takes longer than this many seconds.")
]

@app.command(name="list")
def list_command(
    match: Annotated[Optional[str], typer.Option("--match", "-m", help="Only show addresses containing this text.")] = None,
    table: Annotated[bool, typer.Option("--table", help="Render the contacts as a table.")] = False,
    timeout: TimeoutOption = None,
):
    """Load contacts and print them, sorted, after the 'me' entry."""
    handler = _handler(timeout)
    run_async(handler.handle_list(match=match, as_table=table))

@app.command(name="count")
def count_command(timeout: TimeoutOption = None):
    """Load contacts and print how many addresses were found."""
    handler = _handler(timeout)
    run_async(handler.handle_count())

@app.callback()
def main_callback(
    log_level: Annotated[Optional[str], typer.Option("--log-level", "-l", help="Logging level (DEBUG, INFO, WARNING, ...).")] = None,
):
    """Loads configuration and sets up logging before any command runs."""
    try:
        load_configuration()
    except ContactsError as e:
        ConsoleDisplay().display_error(str(e))
        raise typer.Exit(code=EXIT_FAILURE)
    setup_logging(
        log_level=log_level or str(get_config('logging.level', 'WARNING')),
        log_format=get_config('logging.format', '%(asctime)s - %(name)s - %(levelname)s - %(message)s'),
        log_file=get_config('logging.file'),
    )

# --- Main Execution Guard ---

def cli_entry_point():
    """Function to be called by the script entry point in pyproject.toml."""
    app()

if __name__ == "__main__":
    cli_entry_point()
