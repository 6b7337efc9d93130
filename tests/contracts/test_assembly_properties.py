"""Property-based guarantees of the escaper, the stores and the resolver."""

from __future__ import annotations

from pathlib import Path
import tempfile

from hypothesis import given, settings
from hypothesis import strategies as st
import pytest

from javaopts.errors import UnterminatedQuoteError
from javaopts.fragment import Fragment
from javaopts.resolver import RuntimeContext, resolve
from javaopts.shellwords import escape_option, escape_value, tokenize
from javaopts.store import DirectoryFragmentStore, MemoryFragmentStore

pytestmark = pytest.mark.contract

# Backslash is safe for the escaper but consumed by the tokenizer
_values = st.text(alphabet=st.characters(exclude_characters="\\"), max_size=40)

_fragments = st.lists(
    st.builds(
        Fragment,
        priority=st.integers(min_value=0, max_value=99),
        name=st.from_regex(r"[a-z][a-z0-9_]{0,7}", fullmatch=True),
        content=st.from_regex(r"-D[a-z]{1,5}=[a-z0-9]{0,5}", fullmatch=True),
    ),
    max_size=12,
    unique_by=lambda f: (f.priority, f.name),
)


@given(value=_values)
@settings(max_examples=200, deadline=None, derandomize=True)
def test_escaped_option_tokenizes_back_to_itself(value: str) -> None:
    """Property: tokenize(escape(option)) is the one original option."""
    option = f"-Dkey={value}"
    assert tokenize(escape_option(option)) == [option]


@given(value=_values.filter(bool))
@settings(max_examples=100, deadline=None, derandomize=True)
def test_escaped_value_has_no_unquoted_whitespace(value: str) -> None:
    """Property: an escaped value is always a single shell word."""
    assert len(tokenize(escape_value(value))) == 1


_unquoted = st.text(
    alphabet=st.characters(exclude_characters="'\"\\"), max_size=20
)


@given(prefix=_unquoted, suffix=_unquoted, quote=st.sampled_from(["'", '"']))
@settings(max_examples=100, deadline=None, derandomize=True)
def test_lone_quote_is_always_unterminated(
    prefix: str, suffix: str, quote: str
) -> None:
    """Property: one unmatched quote anywhere fails with the original input."""
    text = prefix + quote + suffix
    with pytest.raises(UnterminatedQuoteError) as exc:
        tokenize(text)
    assert exc.value.source == text
    assert exc.value.quote == quote


@given(fragments=_fragments, data=st.data())
@settings(max_examples=50, deadline=None, derandomize=True)
def test_iteration_order_ignores_insertion_order(
    fragments: list[Fragment], data: st.DataObject
) -> None:
    """Property: both stores list fragments by (priority, name) only."""
    shuffled = data.draw(st.permutations(fragments))
    expected = [(f.key, f.content) for f in sorted(fragments)]

    memory = MemoryFragmentStore(shuffled)
    with tempfile.TemporaryDirectory() as tmp:
        directory = DirectoryFragmentStore(Path(tmp) / "java_opts")
        for fragment in shuffled:
            directory.put(fragment)
        from_disk = [(f.key, f.content) for f in directory.all_ordered()]

    assert [(f.key, f.content) for f in memory.all_ordered()] == expected
    assert from_disk == expected


@given(inbound=st.text(max_size=60))
@settings(max_examples=100, deadline=None, derandomize=True)
def test_inbound_java_opts_is_passed_through_verbatim(inbound: str) -> None:
    """Property: the inbound value is never expanded or duplicated."""
    store = MemoryFragmentStore([Fragment(99, "user", "$JAVA_OPTS")])
    context = RuntimeContext(
        deps_dir="/d", home="/h", environ={"X": "y"}, inbound_java_opts=inbound
    )
    assert resolve(store, context) == inbound.strip()
