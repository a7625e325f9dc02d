"""Small constructors for the Python AST nodes the compiler emits.

Generated code only ever loads and stores plain names, calls helpers from
the template namespace and subscripts dicts, so these few builders cover
almost every node the statement mixins create.
"""

from __future__ import annotations

import ast
from typing import Any


def load(name: str) -> ast.Name:
    return ast.Name(id=name, ctx=ast.Load())


def store(name: str) -> ast.Name:
    return ast.Name(id=name, ctx=ast.Store())


def const(value: Any) -> ast.Constant:
    return ast.Constant(value=value)


def call(func: str | ast.expr, *args: ast.expr) -> ast.Call:
    """``func(*args)``; a string ``func`` is a namespace name."""
    return ast.Call(
        func=load(func) if isinstance(func, str) else func,
        args=list(args),
        keywords=[],
    )


def method(obj: str | ast.expr, name: str, *args: ast.expr) -> ast.Call:
    """``obj.name(*args)``"""
    return ast.Call(
        func=ast.Attribute(
            value=load(obj) if isinstance(obj, str) else obj,
            attr=name,
            ctx=ast.Load(),
        ),
        args=list(args),
        keywords=[],
    )


def assign(target: str | ast.expr, value: ast.expr) -> ast.Assign:
    return ast.Assign(
        targets=[store(target) if isinstance(target, str) else target],
        value=value,
    )


def subscript(obj: str | ast.expr, key: Any, store_ctx: bool = False) -> ast.Subscript:
    """``obj[key]`` with a constant key."""
    return ast.Subscript(
        value=load(obj) if isinstance(obj, str) else obj,
        slice=const(key),
        ctx=ast.Store() if store_ctx else ast.Load(),
    )


def join_buffer(buf_name: str) -> ast.Call:
    """``''.join(buf_name)``"""
    return method(const(""), "join", load(buf_name))


def function_def(
    name: str,
    params: list[str],
    body: list[ast.stmt],
    defaults: list[ast.expr] | None = None,
    vararg: str | None = None,
) -> ast.FunctionDef:
    """Plain ``def name(params...):`` (no decorators or annotations)."""
    return ast.FunctionDef(
        name=name,
        args=ast.arguments(
            posonlyargs=[],
            args=[ast.arg(arg=p) for p in params],
            vararg=ast.arg(arg=vararg) if vararg else None,
            kwonlyargs=[],
            kw_defaults=[],
            kwarg=None,
            defaults=defaults or [],
        ),
        body=body,
        decorator_list=[],
        returns=None,
    )
