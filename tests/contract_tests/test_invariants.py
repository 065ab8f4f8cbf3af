"""
Property Tests for LogUnit Invariants
Verifies ordering through split/append and the privacy filter.
"""

from hypothesis import given, strategies as st
from hypothesis.strategies import composite

from researchlog.contracts.statement import StatementDescriptor
from researchlog.storage import InMemoryDocumentSink
from researchlog.temporal.log_unit import LogUnit

# =============================================================================
# STRATEGIES (Generators)
# =============================================================================

descriptors = st.builds(
    StatementDescriptor,
    name=st.sampled_from(["KeyPress", "CommitText", "Gesture", "Suggestion"]),
    keys=st.just(("value",)),
    is_potentially_private=st.booleans(),
    is_potentially_revealing=st.booleans(),
)


@composite
def statements(draw, min_size=0, start=0):
    """Generates (descriptor, timestamp, value) with non-decreasing timestamps."""
    count = draw(st.integers(min_value=min_size, max_value=25))
    steps = draw(st.lists(st.integers(min_value=0, max_value=50), min_size=count, max_size=count))
    result = []
    current = start
    for step in steps:
        current += step
        result.append((draw(descriptors), current, draw(st.integers() | st.text(max_size=5))))
    return result


def build(stmts):
    unit = LogUnit()
    for descriptor, ts, value in stmts:
        unit.append_statement(descriptor, ts, value)
    return unit


# =============================================================================
# PROPERTY TESTS
# =============================================================================

@given(statements(), st.integers(min_value=-10, max_value=1500))
def test_split_preserves_concatenation(stmts, cut):
    """Earlier ++ later equals the original sequence."""
    unit = build(stmts)
    original = unit.events
    later = unit.split_by_time(cut)
    assert unit.events + later.events == original
    assert all(e.timestamp <= cut for e in unit.events)
    assert all(e.timestamp > cut for e in later.events)


@given(statements())
def test_split_without_later_statements_is_noop(stmts):
    unit = build(stmts)
    original = unit.events
    cut = max((ts for _, ts, _ in stmts), default=0)
    later = unit.split_by_time(cut)
    assert later.is_empty()
    assert unit.events == original
    assert not unit.is_part_of_megaword


@given(statements(min_size=1), st.integers(min_value=0, max_value=1500))
def test_split_marks_both_halves(stmts, cut):
    unit = build(stmts)
    later = unit.split_by_time(cut)
    if not later.is_empty():
        assert unit.is_part_of_megaword
        assert later.is_part_of_megaword


@given(statements(), st.booleans(), st.booleans())
def test_append_concatenates(stmts, digit_a, digit_b):
    first = build(stmts)
    last_ts = stmts[-1][1] if stmts else 0
    second = build([(d, ts + last_ts, v) for d, ts, v in stmts])
    if digit_a:
        first.set_may_contain_digit()
    if digit_b:
        second.set_may_contain_digit()
    first.set_word("word")
    expected = first.events + second.events

    first.append(second)

    assert first.events == expected
    assert not first.has_word()
    assert first.may_contain_digit() == (digit_a or digit_b)
    assert first.is_part_of_megaword


@given(statements(), st.lists(st.integers(min_value=0, max_value=1500), max_size=5))
def test_digit_flag_survives_reshaping(stmts, cuts):
    unit = build(stmts)
    unit.set_may_contain_digit()
    for cut in cuts:
        later = unit.split_by_time(cut)
        assert later.is_empty() or later.may_contain_digit()
        unit.append(later)
        assert unit.may_contain_digit()


@given(statements(), st.booleans(), st.booleans())
def test_privacy_filter(stmts, include_private_data, megaword):
    """Private needs authorization; revealing never leaves a megaword."""
    unit = build(stmts)
    if megaword:
        unit.append(LogUnit())
    sink = InMemoryDocumentSink()
    report = unit.publish(sink, include_private_data)

    published = [r["_ty"] for r in sink.records]
    expected = [
        d.name for d, _, _ in stmts
        if (include_private_data or not d.is_potentially_private)
        and not (megaword and d.is_potentially_revealing)
    ]
    assert published == expected
    assert report.written == len(expected)
    assert report.considered == len(stmts)
