"""
Document Sink Tests

ResearchLog file format, lazy opening, failure reporting and thread safety.
"""

import json
import logging
import threading

import pytest

from researchlog.contracts.base import ErrorCode
from researchlog.storage import DocumentHandle, InMemoryDocumentSink, ResearchLog
from researchlog.temporal.log_unit import LogUnit

from tests.fixtures import KEY_PRESS, make_encoder, mixed_unit


class TestResearchLog:

    @pytest.fixture
    def log_path(self, tmp_path):
        return tmp_path / "logs" / "research.json"

    def test_file_is_created_lazily(self, log_path):
        log = ResearchLog(str(log_path))
        assert not log_path.exists()
        assert log.begin_document().is_success
        assert log_path.exists()
        log.close()

    def test_document_is_a_json_array(self, log_path):
        with ResearchLog(str(log_path)) as log:
            mixed_unit().publish(log, include_private_data=True, encoder=make_encoder())
            assert log.record_count == 4
        records = json.loads(log_path.read_text(encoding="utf-8"))
        assert [r["_ty"] for r in records] == ["KeyPress", "CommitText", "SuggestionPicked", "RawInput"]
        assert list(records[0]) == ["_ct", "_ut", "_ty", "code", "x", "y"]

    def test_empty_document_is_valid_json(self, log_path):
        log = ResearchLog(str(log_path))
        log.begin_document()
        log.close()
        assert json.loads(log_path.read_text(encoding="utf-8")) == []

    def test_begin_document_is_idempotent(self, log_path):
        log = ResearchLog(str(log_path))
        first = log.begin_document().value
        second = log.begin_document().value
        assert first == second
        log.close()

    def test_closed_log_rejects_writes(self, log_path):
        log = ResearchLog(str(log_path))
        handle = log.begin_document().value
        log.close()
        log.close()
        result = log.write_object(handle, {"_ct": 1, "_ut": 1, "_ty": "X"})
        assert result.error.code is ErrorCode.SINK_CLOSED
        assert log.begin_document().error.code is ErrorCode.SINK_CLOSED

    def test_stale_handle_is_rejected(self, log_path):
        log = ResearchLog(str(log_path))
        log.begin_document()
        result = log.write_object(DocumentHandle(document_id=9), {"_ty": "X"})
        assert result.is_failure
        log.close()

    def test_unserializable_record_is_skipped(self, log_path, caplog):
        caplog.set_level(logging.WARNING, logger="researchlog.storage.research_log")
        with ResearchLog(str(log_path)) as log:
            handle = log.begin_document().value
            bad = log.write_object(handle, {"_ty": "Bad", "value": object()})
            good = log.write_object(handle, {"_ty": "Good"})
        assert bad.error.code is ErrorCode.SINK_WRITE_FAILED
        assert good.is_success
        assert json.loads(log_path.read_text(encoding="utf-8")) == [{"_ty": "Good"}]
        assert "skipping" in caplog.text

    @staticmethod
    def _read_strict(path):
        def reject(token):
            raise ValueError(f"non-JSON constant {token}")
        return json.loads(path.read_text(encoding="utf-8"), parse_constant=reject)

    def test_non_finite_argument_is_written_as_null(self, log_path):
        unit = LogUnit()
        unit.append_statement(KEY_PRESS, 10, 65, float("nan"), float("inf"))
        with ResearchLog(str(log_path)) as log:
            report = unit.publish(log, include_private_data=False, encoder=make_encoder())
        assert report.written == 1
        assert report.failed == 0
        records = self._read_strict(log_path)
        assert records[0]["x"] is None
        assert records[0]["y"] is None

    def test_non_finite_record_never_reaches_file(self, log_path, caplog):
        caplog.set_level(logging.WARNING, logger="researchlog.storage.research_log")
        with ResearchLog(str(log_path)) as log:
            handle = log.begin_document().value
            bad = log.write_object(handle, {"_ty": "Bad", "samples": [{"x": float("-inf")}]})
            good = log.write_object(handle, {"_ty": "Good"})
            assert log.record_count == 1
        assert bad.error.code is ErrorCode.SINK_WRITE_FAILED
        assert good.is_success
        assert self._read_strict(log_path) == [{"_ty": "Good"}]

    def test_close_failure_is_logged_not_raised(self, log_path, caplog):
        class FailingCloseFile:
            def __init__(self, inner):
                self._inner = inner

            def write(self, text):
                return self._inner.write(text)

            def close(self):
                self._inner.close()
                raise OSError("No space left on device")

        caplog.set_level(logging.WARNING, logger="researchlog.storage.research_log")
        log = ResearchLog(str(log_path))
        log.begin_document()
        log._file = FailingCloseFile(log._file)
        log.close()
        assert not log.is_open
        assert log.begin_document().error.code is ErrorCode.SINK_CLOSED
        assert "Could not close research log" in caplog.text

    def test_open_failure_is_reported(self, tmp_path):
        blocker = tmp_path / "not_a_dir"
        blocker.write_text("x")
        log = ResearchLog(str(blocker / "research.json"))
        result = log.begin_document()
        assert result.error.code is ErrorCode.SINK_OPEN_FAILED

    def test_concurrent_units_produce_well_formed_document(self, log_path):
        units = []
        for n in range(6):
            unit = LogUnit()
            for i in range(40):
                unit.append_statement(KEY_PRESS, i, n, i, 0)
            units.append(unit)
        with ResearchLog(str(log_path)) as log:
            threads = [threading.Thread(target=u.publish, args=(log, False)) for u in units]
            for t in threads:
                t.start()
            for t in threads:
                t.join()
        records = json.loads(log_path.read_text(encoding="utf-8"))
        assert len(records) == 240
        for n in range(6):
            assert [r["x"] for r in records if r["code"] == n] == list(range(40))


class TestInMemoryDocumentSink:

    def test_documents_are_separated_by_close(self):
        sink = InMemoryDocumentSink()
        first = sink.begin_document().value
        sink.write_object(first, {"_ty": "A"})
        sink.close()
        second = sink.begin_document().value
        sink.write_object(second, {"_ty": "B"})
        assert sink.documents == [[{"_ty": "A"}], [{"_ty": "B"}]]
        assert [r["_ty"] for r in sink.records] == ["A", "B"]

    def test_write_with_old_handle_fails(self):
        sink = InMemoryDocumentSink()
        first = sink.begin_document().value
        sink.close()
        sink.begin_document()
        assert sink.write_object(first, {"_ty": "A"}).error.code is ErrorCode.SINK_CLOSED
