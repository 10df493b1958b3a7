"""
Failure types raised by the Lingua runtime.

Every user-facing failure is a LinguaError carrying a kind tag, a message and
a snapshot of the interpreter's call stack at the time it was raised.
"""
from typing import List, Optional


class LinguaError(Exception):
    """Exception type used to propagate Lingua runtime errors."""
    kind = "LinguaError"

    def __init__(self, message: str, interpreter=None, kind: Optional[str] = None):
        if kind is not None:
            self.kind = kind
        super().__init__(f"{self.kind}: {message}")
        self.message = message
        self.trace: List[str] = interpreter.trace() if interpreter is not None else []


class CallError(LinguaError):
    """Arity mismatch, parameter-pattern mismatch or an operand of the wrong type."""
    kind = "CallException"


class LinguaNameError(LinguaError):
    """An identifier or member that is not bound anywhere visible."""
    kind = "NameError"


class InvalidOperationError(LinguaError):
    """An operator tag the evaluator does not know."""
    kind = "InvalidOperationException"
