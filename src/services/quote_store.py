from __future__ import annotations

import copy
import json
import logging
import shlex
from pathlib import Path
from typing import Protocol

from domain.quotes import QuoteDataError, QuoteDocument, default_document

from .shell import ShellExecutor

logger = logging.getLogger(__name__)

DEFAULT_QUOTES_FILE = Path("currencies.json")


class QuoteStore(Protocol):
    def load(self) -> QuoteDocument: ...

    def save(self, document: QuoteDocument) -> None: ...


class MemoryQuoteStore(QuoteStore):
    """Keeps the quote document in process memory only."""

    def __init__(self, *, initial: QuoteDocument | None = None) -> None:
        self._document = copy.deepcopy(initial) if initial is not None else default_document()

    def load(self) -> QuoteDocument:
        return self._document

    def save(self, document: QuoteDocument) -> None:
        self._document = document


class JsonFileQuoteStore(QuoteStore):
    """Persists the quote document as pretty-printed JSON.

    When a shell executor is given, the file is touched and made world
    read/writable before every load so that other service users can share it.
    """

    def __init__(self, *, path: Path = DEFAULT_QUOTES_FILE, shell: ShellExecutor | None = None) -> None:
        self.path = path
        self.shell = shell

    def load(self) -> QuoteDocument:
        self._prepare_permissions()

        if not self.path.exists() or self.path.stat().st_size == 0:
            logger.info("Seeding %s with the default quote document", self.path)
            self.save(default_document())

        text = self.path.read_text(encoding="utf-8")
        try:
            document = json.loads(text)
        except ValueError as exc:
            raise QuoteDataError(f"{self.path} does not contain valid JSON") from exc

        if not isinstance(document, dict):
            raise QuoteDataError(f"{self.path} does not contain a JSON object")
        return document

    def save(self, document: QuoteDocument) -> None:
        self._ensure_parent()
        self.path.write_text(json.dumps(document, indent=2), encoding="utf-8")

    def _ensure_parent(self) -> None:
        if self.path.parent != Path():
            self.path.parent.mkdir(parents=True, exist_ok=True)

    def _prepare_permissions(self) -> None:
        if self.shell is None:
            return
        self._ensure_parent()
        quoted = shlex.quote(str(self.path))
        self.shell.execute(f"touch {quoted}")
        self.shell.execute(f"chmod 666 {quoted}")


__all__ = ["DEFAULT_QUOTES_FILE", "JsonFileQuoteStore", "MemoryQuoteStore", "QuoteStore"]
