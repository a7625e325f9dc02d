"""Statement compilation for swiglet compiler.

Provides mixins for compiling swiglet tokens to Python AST statements.

The statements package is organized into logical modules:
- basic: Basic output (data, output)
- control_flow: Control flow (if, else, for)
- variables: Variable assignments (set)
- template_structure: Template structure (block, parent, extends, include, import)
- functions: Macros
- special_blocks: Special blocks (filter, autoescape, raw)

Uses inline TYPE_CHECKING declarations for host attributes.

"""

from __future__ import annotations

from swiglet.compiler.statements.basic import BasicStatementMixin
from swiglet.compiler.statements.control_flow import ControlFlowMixin
from swiglet.compiler.statements.functions import FunctionCompilationMixin
from swiglet.compiler.statements.special_blocks import SpecialBlockMixin
from swiglet.compiler.statements.template_structure import TemplateStructureMixin
from swiglet.compiler.statements.variables import VariableAssignmentMixin


class StatementCompilationMixin(
    BasicStatementMixin,
    ControlFlowMixin,
    VariableAssignmentMixin,
    TemplateStructureMixin,
    FunctionCompilationMixin,
    SpecialBlockMixin,
):
    """Combined mixin for compiling all statement types.

    This class combines all statement compilation mixins into a single
    interface that can be inherited by the Compiler class.

    Host attributes and cross-mixin dependencies are declared via inline
    TYPE_CHECKING blocks in each individual mixin.

    """
