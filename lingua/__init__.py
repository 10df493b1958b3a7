# Lingua language runtime
# A tree-walking evaluator for a small class-based scripting language.
from lingua.lingua_errors import LinguaError, CallError, LinguaNameError, InvalidOperationError
from lingua.lingua_scope import Frame, Environment
from lingua.lingua_interpreter import Interpreter
from lingua.lingua_runtime import ScriptRunner, ExecutionResult, StdLib

__all__ = [
    'LinguaError',
    'CallError',
    'LinguaNameError',
    'InvalidOperationError',
    'Frame',
    'Environment',
    'Interpreter',
    'ScriptRunner',
    'ExecutionResult',
    'StdLib',
]
