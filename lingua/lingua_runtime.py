# lingua_runtime.py

import inspect
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Literal, Optional

from lingua.lingua_ast import Expr
from lingua.lingua_datatypes import (
    Obj, NumberObj, StringObj, ListObj, NativeFunctionObj, NULL, BUILTIN_CLASSES,
)
from lingua.lingua_errors import CallError, LinguaError
from lingua.lingua_interpreter import Interpreter
from lingua.lingua_scope import Frame
from lingua.lingua_transformer import LinguaTransformer
from lingua import lingua_serialize


# ===================================================================
# The Standard Library
# ===================================================================
class StdLib:
    """Python implementations of the Lingua intrinsics."""

    def __init__(self, interpreter: Interpreter):
        self.interpreter = interpreter

    def register(self, frame: Frame):
        """Binds every `_name` method into frame as the intrinsic `name`."""
        for name, member in inspect.getmembers(self):
            if name.startswith('_') and not name.startswith('__') and callable(member):
                lingua_name = name[1:]
                arity = len(inspect.signature(member).parameters)
                frame[lingua_name] = NativeFunctionObj(lingua_name, member, arity)

    def _print(self, value):
        self.interpreter.emit('stdout', str(value))
        return NULL

    def _str(self, value):
        return StringObj(str(value))

    def _type(self, value):
        return value.cls

    def _len(self, value):
        if isinstance(value, StringObj):
            return NumberObj(len(value.value))
        if isinstance(value, ListObj):
            return NumberObj(len(value.items))
        raise CallError("invalid type", self.interpreter)

    def _number(self, value):
        if isinstance(value, NumberObj):
            return value
        if isinstance(value, StringObj):
            try:
                return NumberObj(float(value.value))
            except ValueError:
                raise CallError(f"cannot convert {value.value!r} to a number", self.interpreter) from None
        raise CallError("invalid type", self.interpreter)


def install_builtins(frame: Frame) -> Frame:
    """Binds the built-in classes by name into a root frame."""
    for name, cls in BUILTIN_CLASSES.items():
        frame[name] = cls
    return frame


# ===================================================================
# Script Execution
# ===================================================================

@dataclass
class ExecutionResult:
    """The structured result of a script execution."""
    status: Literal['success', 'error']
    value: Any = None
    error_message: Optional[str] = None
    error: Optional[BaseException] = None
    side_effects: List[Dict] = field(default_factory=list)

    @property
    def stdout(self) -> List[str]:
        return [e.get('message', '') for e in self.side_effects if e.get('topics') == ['stdout']]

    def format_error(self) -> str:
        if self.status != 'error':
            return ""
        return str(self.error_message or "Unknown error")


class ScriptRunner:
    """Loads AST documents and evaluates them on one interpreter."""

    def __init__(self, load_stdlib: bool = True, debug: bool = False):
        self.root_scope = install_builtins(Frame("<globals>"))
        self.interpreter = Interpreter(self.root_scope, debug=debug)
        if load_stdlib:
            StdLib(self.interpreter).register(self.root_scope)
        self.transformer = LinguaTransformer()

    def _format_runtime_error(self, e: BaseException) -> str:
        match e:
            case LinguaError():
                msg = str(e)
            case RecursionError():
                msg = "InternalError: RecursionError: maximum recursion depth exceeded"
            case _:
                msg = f"InternalError: {type(e).__name__}: {e}"

        node = self.interpreter.current_node
        loc = getattr(node, 'loc', None)
        if loc is not None:
            msg = f"{msg}\n({loc})"

        st = self._format_stacktrace()
        if st:
            msg += "\n" + st
        return msg

    def _format_stacktrace(self) -> str:
        stack = self.interpreter.call_stack
        if not stack:
            return ""
        frames = []
        if len(stack) > 20:
            frames.append("...")
            stack = stack[-20:]
        for entry in stack:
            args = " ".join(repr(a) for a in entry.get('args') or [])
            frames.append(f"({entry['name']}{' ' + args if args else ''})")
        return "Lingua stacktrace: " + " ".join(frames)

    def run(self, nodes: Iterable[Expr]) -> ExecutionResult:
        """Evaluates top-level nodes in order; the last value is the result."""
        self.interpreter.side_effects.clear()
        self.interpreter.call_stack.clear()
        try:
            result: Obj = NULL
            for node in nodes:
                result = self.interpreter.evaluate(node)
            return ExecutionResult(
                status='success',
                value=result,
                side_effects=self.interpreter.side_effects,
            )
        except Exception as e:
            err_msg = self._format_runtime_error(e)
            self.interpreter.emit('stderr', err_msg)
            return ExecutionResult(
                status='error',
                error_message=err_msg,
                error=e,
                side_effects=self.interpreter.side_effects,
            )

    def load_document(self, text: str, fmt: Optional[str] = None) -> List[Expr]:
        data = lingua_serialize.deserialize(text, fmt=fmt)
        return self.transformer.transform_program(data)

    def run_document(self, text: str, fmt: Optional[str] = None) -> ExecutionResult:
        """Decodes a JSON or YAML AST document and runs it."""
        self.interpreter.side_effects.clear()
        try:
            nodes = self.load_document(text, fmt)
        except ValueError as e:
            msg = f"DocumentError: {e}"
            self.interpreter.emit('stderr', msg)
            return ExecutionResult(status='error', error_message=msg, error=e,
                                   side_effects=self.interpreter.side_effects)
        return self.run(nodes)
