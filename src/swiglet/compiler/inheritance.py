"""Inheritance and block resolution.

Runs once per template, before compilation:

1. Find ``{% extends %}``. It must come before any other content
   (whitespace-only text is allowed) and name exactly one string literal or
   a context variable. A variable can only be resolved with a live context;
   without one the template is *deferred* and resolved again at render time.
2. Collect the top-level ``{% block %}`` tags. Each becomes a
   ``ResolvedBlock`` whose ``parent`` is the block of the same name in the
   parent template, which ``{% parent %}`` emits.
3. Hoist the top-level ``{% set %}`` tags.
4. With a parent, the effective blocks are the parent's overridden by the
   template's own, and the effective tokens are the hoisted sets followed
   by the parent's tokens. Everything else in the child is discarded.

Example:
    ```
    base.html:   <title>{% block title %}Site{% endblock %}</title>
    page.html:   {% extends "base.html" %}{% block title %}{% parent %} | Page{% endblock %}

    page.html renders  <title>Site | Page</title>
    ```

Circular ``extends`` chains are detected with a per-thread stack of the
templates being resolved.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from contextvars import ContextVar
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from swiglet.analysis.names import (
    is_string_literal,
    is_valid_block_name,
    is_valid_name,
    unquote,
)
from swiglet.environment.exceptions import ErrorCode, TemplateResolutionError
from swiglet.nodes import Data, Tag
from swiglet.template.helpers import UNDEFINED, resolve

if TYPE_CHECKING:
    from swiglet.nodes import Node
    from swiglet.template.core import Template


@dataclass(frozen=True, slots=True)
class ResolvedBlock:
    """A block body plus the parent fragment it overrides.

    Attributes:
        name: Block name
        body: Block tokens with the tag's strip markers applied
        parent: Same-named block of the parent template, if any
        lineno: Line of the ``{% block %}`` tag
    """

    name: str
    body: tuple[Node | Tag, ...]
    parent: ResolvedBlock | None
    lineno: int


@dataclass(frozen=True, slots=True)
class Resolution:
    """Effective tokens and blocks of a template after inheritance."""

    nodes: list[Node | Tag]
    blocks: dict[str, ResolvedBlock]
    parent: Template | None = None


_resolving: ContextVar[tuple[str, ...]] = ContextVar("resolving_templates", default=())


def find_extends(nodes: list[Node | Tag]) -> Tag | None:
    """Return the ``extends`` tag of a template, checking its position.

    Raises:
        TemplateResolutionError: If ``extends`` follows other content, or
            appears more than once or inside another tag.
    """
    found: Tag | None = None
    content_seen = False
    for node in nodes:
        if isinstance(node, Tag) and node.name == "extends":
            if content_seen or found is not None:
                raise _misplaced(node)
            found = node
        elif not (isinstance(node, Data) and not node.value.strip()):
            content_seen = True
    _check_nesting(nodes, top_level=True)
    return found


def extends_target(tag: Tag, context: Mapping[str, Any] | None = None) -> str | None:
    """Template name an ``extends`` tag points at.

    Returns None when the argument is a variable and no context is given.

    Raises:
        TemplateResolutionError: If the argument is not exactly one string
            literal or variable, or the variable does not hold a string.
    """
    args = tag.args
    if len(args) == 1 and is_string_literal(args[0]):
        return unquote(args[0])
    if len(args) == 1 and is_valid_name(args[0]):
        if context is None:
            return None
        root, *path = args[0].split(".")
        value = resolve(context.get(root, UNDEFINED), tuple(path))
        if isinstance(value, str):
            return value
    raise TemplateResolutionError(
        f"Extends tag on line {tag.lineno} accepts exactly one string literal as an argument.",
        tag.lineno,
        code=ErrorCode.INVALID_ARGUMENTS,
    )


def resolve_template(
    nodes: list[Node | Tag],
    compile_parent: Callable[[str], Template],
    context: Mapping[str, Any] | None = None,
    name: str | None = None,
) -> Resolution | None:
    """Resolve inheritance for one template.

    Args:
        nodes: The template's top-level tokens
        compile_parent: Loads and compiles a parent template by name
        context: Render context, for ``extends`` naming a variable
        name: Template id, used for circular-extends detection

    Returns:
        The effective tokens and blocks, or None if the template extends a
        variable and no context was given (deferred).

    Raises:
        TemplateResolutionError: On misplaced or circular ``extends`` and
            invalid or nested blocks.
    """
    extends = find_extends(nodes)
    parent: Template | None = None
    parent_resolution: Resolution | None = None

    if extends is not None:
        target = extends_target(extends, context)
        if target is None:
            return None
        stack = _resolving.get()
        if target == name or target in stack:
            raise TemplateResolutionError(
                f'Circular extends found on line {extends.lineno} of "{name}"!',
                extends.lineno,
                code=ErrorCode.CIRCULAR_EXTENDS,
            )
        token = _resolving.set((*stack, name) if name is not None else stack)
        try:
            parent = compile_parent(target)
            parent_resolution = parent.resolution_for(context)
        finally:
            _resolving.reset(token)
        if parent_resolution is None:
            return None

    parent_blocks = parent_resolution.blocks if parent_resolution else {}
    blocks: dict[str, ResolvedBlock] = {}
    sets: list[Node | Tag] = []
    for node in nodes:
        if not isinstance(node, Tag):
            continue
        if node.name == "block":
            block_name = node.args[0] if node.args else ""
            if len(node.args) != 1 or not is_valid_block_name(block_name):
                raise TemplateResolutionError(
                    f'Invalid block tag name "{block_name}" on line {node.lineno}.',
                    node.lineno,
                    code=ErrorCode.INVALID_NAME,
                )
            blocks[block_name] = ResolvedBlock(
                name=block_name,
                body=tuple(node.trimmed_body()),
                parent=parent_blocks.get(block_name),
                lineno=node.lineno,
            )
        elif node.name == "set":
            sets.append(node)

    if parent_resolution is None:
        return Resolution(nodes=list(nodes), blocks=blocks)
    return Resolution(
        nodes=[*sets, *parent_resolution.nodes],
        blocks={**parent_blocks, **blocks},
        parent=parent,
    )


def _check_nesting(nodes: list[Node | Tag], top_level: bool) -> None:
    """Reject block-level tags (``block``, ``extends``) below the top level."""
    for node in nodes:
        if not isinstance(node, Tag):
            continue
        if not top_level and node.spec.block_level:
            if node.name == "extends":
                raise _misplaced(node)
            raise TemplateResolutionError(
                f'Block "{node.args[0] if node.args else ""}" found nested in another '
                f"block tag on line {node.lineno}.",
                node.lineno,
                code=ErrorCode.NESTED_BLOCK,
            )
        _check_nesting(node.body, top_level=False)


def _misplaced(tag: Tag) -> TemplateResolutionError:
    return TemplateResolutionError(
        'Extends tag must be the first tag in the template, but "extends" found '
        f"on line {tag.lineno}.",
        tag.lineno,
        code=ErrorCode.MISPLACED_EXTENDS,
    )
