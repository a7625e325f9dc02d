"""Tag registry.

Every ``{% name %}`` tag is looked up here at parse time. A ``TagSpec``
says whether the tag owns a body closed by ``{% endname %}`` and how it
compiles.

Custom Tags:
``compile`` is a callable ``(compiler, tag) -> list[ast.stmt]``. It may use
the compiler helpers ``compile_body(nodes)``, ``compile_value(text)`` and
``emit_output(expr)``, and reach user objects through the ``_ext``
namespace entry (``Environment(extensions=...)``):

    ```python
    import ast

    def compile_shout(compiler, tag):
        # {% shout "text" %}
        value = compiler.compile_value(tag.args[0], tag.lineno)
        upper = ast.Call(
            func=ast.Attribute(value=compiler.ext("shout"), attr="upper", ctx=ast.Load()),
            args=[value],
            keywords=[],
        )
        return [compiler.emit_output(upper)]

    env = Environment(
        tags={"shout": TagSpec("shout", compile_shout)},
        extensions={"shout": str},
    )
    ```

"""

from __future__ import annotations

import ast
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from swiglet.compiler.core import Compiler
    from swiglet.nodes import Tag

TagCompiler = Callable[["Compiler", "Tag"], list[ast.stmt]]


@dataclass(frozen=True, slots=True)
class TagSpec:
    """How a tag is parsed and compiled.

    Attributes:
        name: Tag name as written in templates
        compile: Compiler method name (built-in tags) or a
            ``(compiler, tag) -> list[ast.stmt]`` callable
        ends: True if the tag owns a body closed by ``{% end<name> %}``
        block_level: True if the tag may only appear at the top level of a
            template (``block``, ``extends``)
    """

    name: str
    compile: str | TagCompiler
    ends: bool = False
    block_level: bool = False


DEFAULT_TAGS: dict[str, TagSpec] = {
    spec.name: spec
    for spec in (
        TagSpec("for", "_compile_for", ends=True),
        TagSpec("if", "_compile_if", ends=True),
        TagSpec("else", "_compile_else"),
        TagSpec("set", "_compile_set"),
        TagSpec("filter", "_compile_filter_block", ends=True),
        TagSpec("macro", "_compile_macro", ends=True),
        TagSpec("include", "_compile_include"),
        TagSpec("import", "_compile_import"),
        TagSpec("block", "_compile_block", ends=True, block_level=True),
        TagSpec("extends", "_compile_extends", block_level=True),
        TagSpec("parent", "_compile_parent"),
        TagSpec("raw", "_compile_raw", ends=True),
        TagSpec("autoescape", "_compile_autoescape", ends=True),
    )
}
