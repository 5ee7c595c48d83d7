"""Practice table: the house AI against a remote or local human player."""

from .console import ConsolePlayer, run_console
from .server import PracticeSession, run_server

__all__ = ["ConsolePlayer", "run_console", "PracticeSession", "run_server"]
