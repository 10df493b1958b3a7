"""Expression and pattern nodes evaluated by the Lingua interpreter.

Nodes are produced outside the runtime (by a parser, or by the document
transformer) and are immutable once built. Equality and hashing are
structural; the source location in `loc` never takes part in either, so two
functions written identically on different lines compare equal.

Parameter patterns form their own closed set. A pattern is matched against an
argument value inside a frame and may bind names into that frame.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Tuple

from lingua.lingua_datatypes import ClassObj, ListObj


@dataclass(frozen=True)
class Loc:
    line: int
    origin: str = "<none>"

    def __str__(self) -> str:
        return f"line {self.line}, {self.origin}"


@dataclass(frozen=True)
class Expr:
    """Base class for all expression nodes."""
    loc: Optional[Loc] = field(default=None, compare=False, kw_only=True)


# --- Literals ---

@dataclass(frozen=True)
class NumberExpr(Expr):
    value: float


@dataclass(frozen=True)
class StringExpr(Expr):
    value: str


@dataclass(frozen=True)
class InterpolatedStringExpr(Expr):
    """A string template; `{{name}}` sections are filled from the active scope."""
    template: str


@dataclass(frozen=True)
class BooleanExpr(Expr):
    value: bool


@dataclass(frozen=True)
class NullExpr(Expr):
    pass


@dataclass(frozen=True)
class ListExpr(Expr):
    items: Tuple[Expr, ...] = ()


# --- Names and structure ---

@dataclass(frozen=True)
class NameExpr(Expr):
    name: str


@dataclass(frozen=True)
class AssignExpr(Expr):
    target: Expr  # NameExpr or MemberExpr
    value: Expr


@dataclass(frozen=True)
class BlockExpr(Expr):
    body: Tuple[Expr, ...] = ()


@dataclass(frozen=True)
class IfExpr(Expr):
    condition: Expr
    then_branch: Expr
    else_branch: Optional[Expr] = None


@dataclass(frozen=True)
class WhileExpr(Expr):
    condition: Expr
    body: Expr


@dataclass(frozen=True)
class FunctionExpr(Expr):
    """A function literal. Anonymous functions have name None."""
    name: Optional[str]
    params: Tuple['Pattern', ...]
    body: Expr


@dataclass(frozen=True)
class CallExpr(Expr):
    callee: Expr
    args: Tuple[Expr, ...] = ()


@dataclass(frozen=True)
class OperatorExpr(Expr):
    """A binary operator expression, `left <op> right`."""
    op: str
    left: Expr
    right: Expr

    def __str__(self) -> str:
        return f"{self.left} {self.op} {self.right}"


@dataclass(frozen=True)
class PrefixExpr(Expr):
    op: str
    operand: Expr


@dataclass(frozen=True)
class MemberExpr(Expr):
    target: Expr
    name: str


@dataclass(frozen=True)
class IndexExpr(Expr):
    target: Expr
    index: Expr


@dataclass(frozen=True)
class ClassExpr(Expr):
    """A class definition. The body holds FunctionExprs and field AssignExprs."""
    name: str
    superclass: Optional[Expr] = None
    body: Tuple[Expr, ...] = ()


# =================================================================
# Parameter patterns
# =================================================================

@dataclass(frozen=True)
class Pattern:
    """Base class for parameter patterns."""
    loc: Optional[Loc] = field(default=None, compare=False, kw_only=True)

    def match(self, interpreter, frame, value) -> bool:
        raise NotImplementedError


@dataclass(frozen=True)
class WildcardPattern(Pattern):
    def match(self, interpreter, frame, value) -> bool:
        return True


@dataclass(frozen=True)
class NamePattern(Pattern):
    name: str

    def match(self, interpreter, frame, value) -> bool:
        frame.define(self.name, value)
        return True


@dataclass(frozen=True)
class LiteralPattern(Pattern):
    """Accepts only arguments equal to the literal's value."""
    literal: Expr

    def match(self, interpreter, frame, value) -> bool:
        return interpreter.evaluate(self.literal) == value


@dataclass(frozen=True)
class TypedPattern(Pattern):
    """Binds name when the argument's class is, or descends from, the named class."""
    name: str
    class_expr: Expr

    def match(self, interpreter, frame, value) -> bool:
        cls = interpreter.evaluate(self.class_expr)
        if not isinstance(cls, ClassObj) or not value.cls.is_subclass_of(cls):
            return False
        frame.define(self.name, value)
        return True


@dataclass(frozen=True)
class ListPattern(Pattern):
    """Destructures a list of exactly len(items) elements."""
    items: Tuple[Pattern, ...] = ()

    def match(self, interpreter, frame, value) -> bool:
        if not isinstance(value, ListObj) or len(value.items) != len(self.items):
            return False
        return all(p.match(interpreter, frame, v) for p, v in zip(self.items, value.items))
