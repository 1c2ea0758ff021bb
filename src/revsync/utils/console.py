"""User facing console used by workflows for progress, warnings and prompts."""

from abc import ABC, abstractmethod
from typing import Optional

from loguru import logger
from rich.console import Console as RichConsole
from rich.prompt import Confirm


class Console(ABC):
    """Console abstraction for workflow output."""

    @abstractmethod
    def progress(self, message: str) -> None:
        pass

    @abstractmethod
    def info(self, message: str) -> None:
        pass

    @abstractmethod
    def warn(self, message: str) -> None:
        pass

    @abstractmethod
    def error(self, message: str) -> None:
        pass

    @abstractmethod
    def prompt_for_confirmation(self, message: str) -> bool:
        """Ask the user a yes/no question."""
        pass


class TerminalConsole(Console):
    """Interactive console rendered with rich."""

    def __init__(
        self, verbose: bool = False, rich_console: Optional[RichConsole] = None
    ):
        self.verbose = verbose
        self.console = rich_console or RichConsole(stderr=True)

    def progress(self, message: str) -> None:
        self.console.print(f'[blue]Task:[/blue] {message}')

    def info(self, message: str) -> None:
        self.console.print(f'[green]INFO:[/green] {message}')

    def warn(self, message: str) -> None:
        self.console.print(f'[yellow]WARN:[/yellow] {message}')

    def error(self, message: str) -> None:
        self.console.print(f'[red]ERROR:[/red] {message}')

    def prompt_for_confirmation(self, message: str) -> bool:
        return Confirm.ask(message, console=self.console, default=False)


class LogConsole(Console):
    """Non interactive console writing through loguru."""

    def __init__(self, auto_confirm: bool = False):
        self.auto_confirm = auto_confirm
        self.logger = logger.bind(component='Console')

    def progress(self, message: str) -> None:
        self.logger.info(f'Task: {message}')

    def info(self, message: str) -> None:
        self.logger.info(message)

    def warn(self, message: str) -> None:
        self.logger.warning(message)

    def error(self, message: str) -> None:
        self.logger.error(message)

    def prompt_for_confirmation(self, message: str) -> bool:
        self.logger.info(f'{message} (auto answer: {"yes" if self.auto_confirm else "no"})')
        return self.auto_confirm
