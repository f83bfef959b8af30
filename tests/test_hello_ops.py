import threading
from functools import reduce

import pytest

from paladin.errors import FatalError, FatalStrategy
from paladin.hello_ops import CharToString, StringConcat

INPUT = (
    "Lorem ipsum dolor sit amet, consectetur adipiscing elit, sed do eiusmod "
    "tempor incididunt ut labore et dolore magna aliqua."
)


def test_char_to_string_returns_character():
    assert CharToString(step=0).execute("q", None) == "q"


def test_char_to_string_aborts_on_first_iteration():
    abort = threading.Event()
    abort.set()
    with pytest.raises(FatalError) as info:
        CharToString(step=0).execute("a", abort)
    assert info.value.fatal_strategy() is FatalStrategy.TERMINATE
    assert str(info.value) == (
        "Fatal operation error: aborted per request at CharToString "
        "iteration 1 for input 'a'"
    )


def test_char_to_string_unset_abort_completes():
    assert CharToString(step=0).execute("z", threading.Event()) == "z"


def test_string_concat_empty_and_combine():
    m = StringConcat()
    assert m.empty() == ""
    assert m.combine("foo", "bar") == "foobar"
    assert m.execute(("foo", "bar"), None) == "foobar"


def test_pipeline_reassembles_input():
    op = CharToString(step=0)
    m = StringConcat()
    pieces = [op.execute(c) for c in INPUT]
    assert reduce(lambda a, b: m.combine(a, b), pieces, m.empty()) == INPUT


def test_string_concat_is_associative():
    m = StringConcat()
    a, b, c = "Lorem", " ipsum", " dolor"
    assert m.combine(m.combine(a, b), c) == m.combine(a, m.combine(b, c))