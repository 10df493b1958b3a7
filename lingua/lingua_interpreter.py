"""
The core Lingua interpreter: node dispatch, operators and calls.
"""
import math
import os
import sys
from typing import Any, Dict, List, Optional, Sequence

import pystache
from pystache.context import KeyNotFoundError

from lingua.lingua_ast import (
    Expr, NumberExpr, StringExpr, InterpolatedStringExpr, BooleanExpr, NullExpr,
    ListExpr, NameExpr, AssignExpr, BlockExpr, IfExpr, WhileExpr, FunctionExpr,
    CallExpr, OperatorExpr, PrefixExpr, MemberExpr, IndexExpr, ClassExpr,
)
from lingua.lingua_datatypes import (
    Obj, ClassObj, NumberObj, StringObj, BooleanObj, ListObj, NULL,
    FunctionObj, GenericFunctionObj, OBJECT_CLASS,
)
from lingua.lingua_errors import CallError, InvalidOperationError, LinguaNameError
from lingua.lingua_scope import Environment, Frame


def _template_context(frame: Frame, globals_frame: Frame) -> Dict[str, str]:
    """Flatten the active chain into display strings; inner bindings win."""
    chain = list(frame.chain())
    if globals_frame not in chain:
        chain.append(globals_frame)
    out: Dict[str, str] = {}
    for f in reversed(chain):
        for k, v in f.bindings.items():
            out[k] = str(v)
    return out


class Interpreter:
    """The Lingua execution engine."""

    def __init__(self, globals_frame: Optional[Frame] = None, debug: bool = False):
        self.env = Environment(globals_frame)
        self.debug = debug
        self.side_effects: List[Dict[str, Any]] = []
        self.call_stack: List[Dict[str, Any]] = []
        self.current_node: Optional[Expr] = None
        self._active = 0

    @property
    def globals(self) -> Frame:
        return self.env.globals

    def _dbg(self, *parts):
        if self.debug or os.environ.get("LINGUA_DEBUG"):
            print("[DBG]", *parts, file=sys.stderr)

    def trace(self) -> List[str]:
        """Names of the active calls, outermost first."""
        return [entry['name'] for entry in self.call_stack]

    def emit(self, topic: str, message: str):
        self.side_effects.append({'topics': [topic], 'message': message})

    # -----------------------------------------------------------------
    # Calls
    # -----------------------------------------------------------------

    def call(self, func: Obj, args: Sequence[Obj], call_site: Optional[Expr] = None) -> Obj:
        """Calls any callable value, keeping the call stack for diagnostics.

        A call that fails leaves its entry on call_stack for the error report.
        Leftover entries are dropped the next time the interpreter is entered
        from outside.
        """
        self._enter()
        try:
            name = getattr(func, 'name', None) or str(func)
            if isinstance(func, FunctionObj):
                name = func.frame_name()
            self._dbg("call", name, "argc", len(args))
            self.call_stack.append({
                'name': name,
                'func': func,
                'args': list(args),
                'call_site': getattr(call_site, 'loc', None),
            })
            if call_site is not None:
                self.current_node = call_site
            result = func.call(self, list(args))
            self.call_stack.pop()
            return result
        finally:
            self._active -= 1

    def _enter(self):
        if not self._active:
            self.call_stack.clear()
        self._active += 1

    # -----------------------------------------------------------------
    # Evaluation
    # -----------------------------------------------------------------

    def evaluate(self, node: Expr) -> Obj:
        """Evaluates one node against the active scope stack."""
        self._enter()
        try:
            return self._eval(node)
        finally:
            self._active -= 1

    def _eval(self, node: Expr) -> Obj:
        self.current_node = node
        match node:
            case NumberExpr():
                return NumberObj(node.value)
            case StringExpr():
                return StringObj(node.value)
            case InterpolatedStringExpr():
                renderer = pystache.Renderer(escape=lambda u: u, missing_tags='strict')
                context = _template_context(self.env.top, self.env.globals)
                try:
                    return StringObj(renderer.render(node.template, context))
                except KeyNotFoundError as e:
                    raise LinguaNameError(f"undefined variable {e.key}", self) from None
            case BooleanExpr():
                return BooleanObj.of(node.value)
            case NullExpr():
                return NULL
            case ListExpr():
                return ListObj([self.evaluate(item) for item in node.items])
            case NameExpr():
                return self.env.lookup(node.name, self)
            case AssignExpr():
                return self._eval_assign(node)
            case BlockExpr():
                return self._eval_block(node)
            case IfExpr():
                if self.evaluate(node.condition).is_truthy():
                    return self.evaluate(node.then_branch)
                if node.else_branch is not None:
                    return self.evaluate(node.else_branch)
                return NULL
            case WhileExpr():
                while self.evaluate(node.condition).is_truthy():
                    self.evaluate(node.body)
                return NULL
            case FunctionExpr():
                return self._eval_function(node)
            case CallExpr():
                func = self.evaluate(node.callee)
                args = [self.evaluate(arg) for arg in node.args]
                return self.call(func, args, node)
            case OperatorExpr():
                return self._eval_operator(node)
            case PrefixExpr():
                return self._eval_prefix(node)
            case MemberExpr():
                return self.evaluate(node.target).get_member(self, node.name)
            case IndexExpr():
                return self._eval_index(node)
            case ClassExpr():
                return self._eval_class(node)
            case _:
                raise InvalidOperationError(f"cannot evaluate {type(node).__name__}", self)

    def _eval_assign(self, node: AssignExpr) -> Obj:
        match node.target:
            case NameExpr(name=name):
                value = self.evaluate(node.value)
                self.env.assign(name, value)
                return value
            case MemberExpr(target=target, name=name):
                owner = self.evaluate(target)
                value = self.evaluate(node.value)
                owner.set_member(self, name, value)
                return value
            case _:
                raise InvalidOperationError("invalid assignment target", self)

    def _eval_block(self, node: BlockExpr) -> Obj:
        self.env.push_frame("block")
        try:
            result = NULL
            for expr in node.body:
                result = self.evaluate(expr)
            return result
        finally:
            self.env.pop_frame()

    def _eval_function(self, node: FunctionExpr) -> Obj:
        fn = FunctionObj(node.name or "lambda", node.params, node.body, self.env.top)
        if node.name is None:
            return fn
        return self._define_function(self.env.top.bindings, fn)

    def _define_function(self, table: Dict[str, Obj], fn: FunctionObj) -> Obj:
        """Binds fn in table, folding same-named functions into an overload set."""
        existing = table.get(fn.name)
        if isinstance(existing, GenericFunctionObj):
            value = existing.with_method(fn)
        elif isinstance(existing, FunctionObj) and existing.params != fn.params:
            value = GenericFunctionObj(fn.name, [existing, fn])
        else:
            value = fn
        table[fn.name] = value
        return value

    def _eval_index(self, node: IndexExpr) -> Obj:
        target = self._coerce(self.evaluate(node.target), ListObj)
        index = self._coerce(self.evaluate(node.index), NumberObj).value
        if not index.is_integer():
            raise CallError("invalid type", self)
        if not 0 <= index < len(target.items):
            raise CallError("index out of bounds", self)
        return target.items[int(index)]

    def _eval_class(self, node: ClassExpr) -> Obj:
        superclass = OBJECT_CLASS
        if node.superclass is not None:
            superclass = self._coerce(self.evaluate(node.superclass), ClassObj)
        cls = ClassObj(node.name, superclass)
        self.env.push_frame(node.name)
        try:
            for member in node.body:
                match member:
                    case FunctionExpr(name=str()):
                        fn = FunctionObj(member.name, member.params, member.body, self.env.top)
                        self._define_function(cls.methods, fn)
                    case AssignExpr(target=NameExpr(name=name)):
                        cls.field_defaults[name] = self.evaluate(member.value)
                    case _:
                        self.evaluate(member)
        finally:
            self.env.pop_frame()
        self.env.define(node.name, cls)
        return cls

    # -----------------------------------------------------------------
    # Operators
    # -----------------------------------------------------------------

    def _coerce(self, value: Obj, kind: type) -> Any:
        if isinstance(value, kind):
            return value
        raise CallError("invalid type", self)

    def _number(self, expr: Expr) -> float:
        return self._coerce(self.evaluate(expr), NumberObj).value

    def _eval_operator(self, node: OperatorExpr) -> Obj:
        left, right = node.left, node.right
        match node.op:
            case '+':
                l = self.evaluate(left)
                r = self.evaluate(right)
                if isinstance(l, NumberObj) and isinstance(r, NumberObj):
                    return NumberObj(l.value + r.value)
                return StringObj(str(l) + str(r))
            case '-':
                return NumberObj(self._number(left) - self._number(right))
            case '*':
                return NumberObj(self._number(left) * self._number(right))
            case '/':
                return NumberObj(self._number(left) / self._number(right))
            case '^':
                return NumberObj(math.pow(self._number(left), self._number(right)))
            case '==':
                return BooleanObj.of(self.evaluate(left) == self.evaluate(right))
            case '!=':
                return BooleanObj.of(not self.evaluate(left) == self.evaluate(right))
            case '<':
                return BooleanObj.of(self._number(left) < self._number(right))
            case '<=':
                return BooleanObj.of(self._number(left) <= self._number(right))
            case '>':
                return BooleanObj.of(self._number(left) > self._number(right))
            case '>=':
                return BooleanObj.of(self._number(left) >= self._number(right))
            case '&&':
                return BooleanObj.of(self.evaluate(left).is_truthy() and self.evaluate(right).is_truthy())
            case '||':
                return BooleanObj.of(self.evaluate(left).is_truthy() or self.evaluate(right).is_truthy())
            case 'is':
                value = self.evaluate(left)
                cls = self._coerce(self.evaluate(right), ClassObj)
                return BooleanObj.of(value.cls.is_subclass_of(cls))
            case _:
                raise InvalidOperationError(f"invalid operator {node.op}", self)

    def _eval_prefix(self, node: PrefixExpr) -> Obj:
        match node.op:
            case '-':
                return NumberObj(-self._number(node.operand))
            case '!':
                return BooleanObj.of(not self.evaluate(node.operand).is_truthy())
            case _:
                raise InvalidOperationError(f"invalid operator {node.op}", self)
