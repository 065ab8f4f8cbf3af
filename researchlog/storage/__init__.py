"""
Document Storage Layer

RESPONSIBILITY: Accept finished records one at a time and persist them
ALLOWED INPUTS: Encoded records (insertion-ordered dicts)
OUTPUTS: Result per write

WHAT THIS LAYER MUST NOT DO:
============================
- Filter or interpret records (privacy is decided before this layer)
- Reorder fields inside a record
- Retry failed writes

BOUNDARY ENFORCEMENT:
=====================
- Sinks are the only objects shared between publishing threads
- Every write_object call is atomic with respect to other writers
- Failures are returned as Result, never raised to the publisher
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional
import threading

from ..contracts.base import Error, ErrorCode, Result


@dataclass(frozen=True)
class DocumentHandle:
    """Identifies the document a sink currently has open."""
    document_id: int


# =============================================================================
# SINK INTERFACE (Dependency Inversion)
# =============================================================================

class DocumentSink:
    """
    Abstract destination for serialized records.

    Implementations must be safe to call from several threads at once.
    """

    def begin_document(self) -> Result:
        """Open the current document if needed; value is a DocumentHandle."""
        raise NotImplementedError

    def write_object(self, handle: DocumentHandle, record: Mapping[str, Any]) -> Result:
        """Append one record to the document identified by handle."""
        raise NotImplementedError

    def close(self) -> None:
        raise NotImplementedError

    @property
    def is_open(self) -> bool:
        raise NotImplementedError

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False


def closed_sink_error(handle: Optional[DocumentHandle]) -> Error:
    error = Error.create(ErrorCode.SINK_CLOSED, "Document is not open for writing")
    if handle is not None:
        error = error.with_context("document_id", str(handle.document_id))
    return error


# =============================================================================
# IN-MEMORY SINK (Reference Implementation)
# =============================================================================

class InMemoryDocumentSink(DocumentSink):
    """
    Keeps every document as a list of records.

    A new document starts on the first begin_document after a close.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._documents: List[List[Dict[str, Any]]] = []
        self._open = False

    def begin_document(self) -> Result:
        with self._lock:
            if not self._open:
                self._documents.append([])
                self._open = True
            return Result.success(DocumentHandle(document_id=len(self._documents) - 1))

    def write_object(self, handle: DocumentHandle, record: Mapping[str, Any]) -> Result:
        with self._lock:
            if not self._open or handle.document_id != len(self._documents) - 1:
                return Result.failure(closed_sink_error(handle))
            self._documents[handle.document_id].append(dict(record))
            return Result.success(handle)

    def close(self) -> None:
        with self._lock:
            self._open = False

    @property
    def is_open(self) -> bool:
        with self._lock:
            return self._open

    @property
    def documents(self) -> List[List[Dict[str, Any]]]:
        with self._lock:
            return [list(doc) for doc in self._documents]

    @property
    def records(self) -> List[Dict[str, Any]]:
        """All records of all documents, in write order."""
        with self._lock:
            return [record for doc in self._documents for record in doc]


from .research_log import ResearchLog  # noqa: E402

__all__ = [
    'DocumentHandle',
    'DocumentSink',
    'InMemoryDocumentSink',
    'ResearchLog',
]
