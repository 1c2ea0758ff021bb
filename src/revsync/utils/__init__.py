"""Logging and console utilities."""

from .console import Console, LogConsole, TerminalConsole
from .logging import setup_logging

__all__ = ['Console', 'LogConsole', 'TerminalConsole', 'setup_logging']
