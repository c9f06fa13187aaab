from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Callable, Optional, Protocol

logger = logging.getLogger(__name__)


class PublicationSink(Protocol):
    """
    Protocol for the store that receives canonical publications.

    A sink is opened once per import run, written to once per publication,
    and closed when the run ends (also on early termination).
    """

    def open(self) -> None:
        """Acquire the connection; raise if the store cannot be reached."""

    def write(self, collection: str, publication: Mapping[str, Any]) -> None:
        """Persist one publication into the given collection/table."""

    def close(self) -> None:
        """Release the connection."""


class Prompter(Protocol):
    """Protocol for the single yes/no gate asked before writing."""

    def confirm(self, question: str) -> bool:
        """Return True if the operator accepted."""


class FileSystem(Protocol):
    """Protocol for the file access the uploader needs."""

    def exists(self, directory: str) -> bool:
        """Return True if the source directory exists."""

    def list_json_files(self, directory: str) -> list[str]:
        """Return the names of the JSON files in the directory, sorted."""

    def read_text(self, directory: str, name: str) -> str:
        """Return the content of one file as text."""


class LocalFileSystem:
    """FileSystem backed by the local disk (non-recursive)."""

    def exists(self, directory: str) -> bool:
        return Path(directory).is_dir()

    def list_json_files(self, directory: str) -> list[str]:
        return sorted(
            entry.name
            for entry in Path(directory).iterdir()
            if entry.is_file() and entry.name.endswith('.json')
        )

    def read_text(self, directory: str, name: str) -> str:
        return (Path(directory) / name).read_text(encoding='utf-8')


class ConsolePrompter:
    """
    Prompter reading the answer from standard input.

    Accepts ``yes`` or ``y`` (case-insensitive); anything else, including
    end of input, is a refusal.
    """

    def __init__(self, input_func: Optional[Callable[[str], str]] = None):
        self._input = input_func or input

    def confirm(self, question: str) -> bool:
        try:
            answer = self._input(question)
        except EOFError:
            logger.warning("No answer received on standard input")
            return False
        return answer.strip().lower() in ('yes', 'y')
