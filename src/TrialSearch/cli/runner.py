"""Command runner for coordinating CLI execution.

Manages component lifecycle, resource cleanup, logging configuration,
and error handling for command execution.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Protocol

import click

from TrialSearch.config import AppConfig
from TrialSearch.core.errors import ValidationError
from TrialSearch.remote import create_api_client
from TrialSearch.services import (
    DynamicValueSource,
    ExecutionLog,
    QueryPersistenceService,
    create_execution_log,
    create_persistence_service,
    create_value_source,
)
from TrialSearch.storage import create_local_store
from TrialSearch.utils.log import configure_logging, log


class Command(Protocol):
    def execute(self) -> str:
        raise NotImplementedError


@dataclass(frozen=True, slots=True)
class CommandContext:
    """Services available to a command while its database is open."""

    config: AppConfig
    persistence: QueryPersistenceService
    execution_log: ExecutionLog
    values: DynamicValueSource


class CommandRunner:
    """Orchestrates command execution with proper resource management."""

    def __init__(self, config: AppConfig) -> None:
        self.config = config

    def run(self, action: str, build: Callable[[CommandContext], Command]) -> None:
        """Build and execute one command, printing its output.

        Args:
            action: The CLI command name (e.g. 'save').
            build: Creates the command from the wired services.

        Raises:
            click.UsageError: When the input is invalid.
            click.Abort: When the command fails for any other reason.
        """
        configure_logging(
            level=self.config.runtime.level,
            action=action,
            log_to_file=self.config.runtime.to_file,
            log_dir=self.config.runtime.dir,
        )
        try:
            output = self._execute(build)
        except ValidationError as e:
            raise click.UsageError(str(e)) from e
        except Exception as e:  # noqa: BLE001 - cli boundary
            log.error("%s failed: %s", action.capitalize(), e)
            raise click.Abort from e
        click.echo(output, nl=False)

    def _execute(self, build: Callable[[CommandContext], Command]) -> str:
        client = create_api_client(self.config)
        try:
            db_manager, local_store = create_local_store(self.config)
            with db_manager:
                context = CommandContext(
                    config=self.config,
                    persistence=create_persistence_service(self.config, local_store, client),
                    execution_log=create_execution_log(self.config, local_store),
                    values=create_value_source(client),
                )
                return build(context).execute()
        finally:
            if client is not None:
                client.close()
