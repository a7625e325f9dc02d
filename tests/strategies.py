"""Shared hypothesis strategies for swiglet property-based testing.

Provides reusable strategies that generate structurally valid template
inputs:

- **Lexer**: Literal text and template fragments with valid delimiters
- **Loops**: Item lists for ``{% for %}`` invariants
- **Filters**: Filter names drawn from the built-in registry

These are building blocks -- individual test modules compose them into
property-specific strategies.
"""

from __future__ import annotations

from hypothesis import strategies as st

from swiglet.analysis.names import RESERVED_NAMES
from swiglet.environment.filters import DEFAULT_FILTERS

# ---------------------------------------------------------------------------
# Lexer strategies
# ---------------------------------------------------------------------------

# Plain text that does NOT contain swiglet delimiters (no { or })
# Used for the literal-identity invariant.
plain_text = st.text(
    alphabet=st.characters(
        blacklist_categories=("Cs",),  # no surrogates
        blacklist_characters="{}\x00",
    ),
    min_size=0,
    max_size=200,
)

# Valid variable expressions: {{ identifier }}
identifier = st.from_regex(r"[a-z][a-z0-9_]{0,12}", fullmatch=True).filter(
    lambda name: name not in RESERVED_NAMES
)
swiglet_variable = identifier.map(lambda name: f"{{{{ {name} }}}}")

# Valid comments: {# text #}
_comment_body = st.from_regex(r"[a-zA-Z0-9_ ]{0,30}", fullmatch=True)
swiglet_comment = _comment_body.map(lambda body: f"{{# {body} #}}")

# Template fragments: plain text interleaved with variables and comments
template_fragment = st.lists(
    st.one_of(plain_text, swiglet_variable, swiglet_comment),
    min_size=1,
    max_size=5,
).map("".join)

# Arbitrary text that might stress the lexer (fuzz-like)
arbitrary_template_source = st.text(
    alphabet=st.characters(blacklist_categories=("Cs",)),
    min_size=0,
    max_size=300,
)

# ---------------------------------------------------------------------------
# Loop strategies
# ---------------------------------------------------------------------------

loop_items = st.lists(
    st.one_of(st.integers(-1000, 1000), st.text(alphabet="abcxyz", max_size=5)),
    min_size=0,
    max_size=30,
)

# ---------------------------------------------------------------------------
# Filter strategies
# ---------------------------------------------------------------------------

# String-to-string filters safe to chain on any text
string_filter_names = st.sampled_from(
    sorted(
        name
        for name in ("lower", "upper", "title", "capitalize", "striptags", "addslashes", "url_encode")
        if name in DEFAULT_FILTERS
    )
)

filter_chain = st.lists(string_filter_names, min_size=1, max_size=4)
