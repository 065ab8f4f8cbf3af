"""
Research Log File Sink

RESPONSIBILITY: Persist one session's records as a single JSON array file
OUTPUTS: Result per write; the file itself

GUARANTEES:
===========
- No file exists until a record is about to be written
- Records that fail to serialize never reach the file
- I/O failures are logged and returned, never raised to the publisher
"""

from __future__ import annotations
from typing import Any, Mapping, Optional
import logging
import os
import threading

from ..contracts.base import Error, ErrorCode, Result
from ..domain.serialization import dumps_record
from . import DocumentHandle, DocumentSink, closed_sink_error

logger = logging.getLogger(__name__)


class ResearchLog(DocumentSink):
    """
    File-backed sink writing one JSON array per log file.

    The file is only created when the first record is about to be written,
    so a session in which nothing passes the privacy filter leaves no file
    behind. Closing terminates the array; a closed log cannot be reopened.
    """

    def __init__(self, path: str):
        self._path = path
        self._lock = threading.Lock()
        self._file = None
        self._handle: Optional[DocumentHandle] = None
        self._record_count = 0
        self._closed = False

    @property
    def path(self) -> str:
        return self._path

    @property
    def record_count(self) -> int:
        with self._lock:
            return self._record_count

    @property
    def is_open(self) -> bool:
        with self._lock:
            return self._file is not None

    def begin_document(self) -> Result:
        with self._lock:
            if self._closed:
                return Result.failure(closed_sink_error(None).with_context("path", self._path))
            if self._file is not None:
                return Result.success(self._handle)
            try:
                directory = os.path.dirname(self._path)
                if directory:
                    os.makedirs(directory, exist_ok=True)
                self._file = open(self._path, "w", encoding="utf-8")
                self._file.write("[")
            except OSError as e:
                logger.warning("Could not open research log %s: %s", self._path, e)
                self._file = None
                return Result.failure(Error.create(
                    ErrorCode.SINK_OPEN_FAILED, str(e)
                ).with_context("path", self._path))
            self._handle = DocumentHandle(document_id=0)
            return Result.success(self._handle)

    def write_object(self, handle: DocumentHandle, record: Mapping[str, Any]) -> Result:
        # Serialize outside the lock; a bad record never touches the file.
        try:
            text = dumps_record(record)
        except (TypeError, ValueError) as e:
            logger.warning("Error serializing record; skipping it: %s", e)
            return Result.failure(Error.create(ErrorCode.SINK_WRITE_FAILED, str(e)))

        with self._lock:
            if self._file is None or handle != self._handle:
                return Result.failure(closed_sink_error(handle))
            separator = ",\n" if self._record_count else "\n"
            try:
                self._file.write(separator + text)
            except OSError as e:
                logger.warning("Error writing to research log %s; skipping record: %s", self._path, e)
                return Result.failure(Error.create(
                    ErrorCode.SINK_WRITE_FAILED, str(e)
                ).with_context("path", self._path))
            self._record_count += 1
            return Result.success(handle)

    def flush(self) -> None:
        with self._lock:
            if self._file is not None:
                self._file.flush()

    def close(self) -> None:
        with self._lock:
            self._closed = True
            if self._file is None:
                return
            log_file, self._file = self._file, None
            try:
                log_file.write("\n]\n")
            except OSError as e:
                logger.warning("Could not terminate research log %s: %s", self._path, e)
            try:
                # Closing flushes the buffer and can fail too.
                log_file.close()
            except OSError as e:
                logger.warning("Could not close research log %s: %s", self._path, e)
