"""
Defines the runtime values of the Lingua language.

Every value is an Obj and carries a reference to its runtime ClassObj.
Numbers, strings, booleans, null and lists are the primitive variants;
functions and classes are first-class values as well.
"""

import math
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from lingua.lingua_errors import CallError, LinguaNameError
from lingua.lingua_scope import Frame


# =================================================================
# Base value
# =================================================================

class Obj:
    """Base class of every Lingua value. Plain Obj instances are user objects."""
    klass: 'ClassObj' = None  # bound below, once the built-in classes exist

    def __init__(self, cls: Optional['ClassObj'] = None):
        self._cls = cls
        self.fields: Dict[str, 'Obj'] = {}

    @property
    def cls(self) -> 'ClassObj':
        return self._cls if self._cls is not None else type(self).klass

    def is_truthy(self) -> bool:
        return True

    def call(self, interpreter, args: Sequence['Obj']) -> 'Obj':
        raise CallError(f"{self} is not callable", interpreter)

    def get_member(self, interpreter, name: str) -> 'Obj':
        if name in self.fields:
            return self.fields[name]
        found = self.cls.find_method(name)
        if found is not None:
            owner, method = found
            return bind_method(method, self, owner)
        raise LinguaNameError(f"undefined member {name} on {self}", interpreter)

    def set_member(self, interpreter, name: str, value: 'Obj'):
        self.fields[name] = value

    def __str__(self) -> str:
        return f"<{self.cls.name} instance>"

    def __repr__(self) -> str:
        from lingua.lingua_printer import Printer
        return Printer().pformat(self)


def bind_method(method: 'Obj', instance: 'Obj', owner: 'ClassObj') -> 'Obj':
    """Binds self to instance, and super to a view starting above owner."""
    if not isinstance(method, (FunctionObj, GenericFunctionObj)):
        return method
    bound = method.with_self(instance)
    if owner.superclass is not None:
        bound = bound.with_super(SuperObj(instance, owner.superclass))
    return bound


# =================================================================
# Classes
# =================================================================

class ClassObj(Obj):
    """A class: a name, an optional superclass and a method table."""

    def __init__(self, name: str, superclass: Optional['ClassObj'] = None,
                 methods: Optional[Dict[str, Obj]] = None,
                 field_defaults: Optional[Dict[str, Obj]] = None,
                 instantiable: bool = True):
        super().__init__()
        self.name = name
        self.superclass = superclass
        self.methods: Dict[str, Obj] = dict(methods or {})
        self.field_defaults: Dict[str, Obj] = dict(field_defaults or {})
        self.instantiable = instantiable

    def ancestry(self) -> List['ClassObj']:
        """This class followed by each superclass, nearest first."""
        out = []
        cls = self
        while cls is not None:
            out.append(cls)
            cls = cls.superclass
        return out

    def is_subclass_of(self, other: 'ClassObj') -> bool:
        return any(cls is other for cls in self.ancestry())

    def find_method(self, name: str) -> Optional[Tuple['ClassObj', Obj]]:
        """Returns (owning class, method) for the nearest definition of name."""
        for cls in self.ancestry():
            if name in cls.methods:
                return cls, cls.methods[name]
        return None

    def call(self, interpreter, args: Sequence[Obj]) -> Obj:
        if not self.instantiable:
            raise CallError(f"cannot instantiate class {self.name}", interpreter)
        instance = Obj(self)
        for cls in reversed(self.ancestry()):
            instance.fields.update(cls.field_defaults)
        found = self.find_method("init")
        if found is not None:
            owner, init = found
            interpreter.call(bind_method(init, instance, owner), list(args))
        elif args:
            raise CallError(f"invalid number of arguments for class {self.name}", interpreter)
        return instance

    def get_member(self, interpreter, name: str) -> Obj:
        found = self.find_method(name)
        if found is not None:
            return found[1]
        for cls in self.ancestry():
            if name in cls.field_defaults:
                return cls.field_defaults[name]
        raise LinguaNameError(f"undefined member {name} on {self}", interpreter)

    def __str__(self) -> str:
        return f"<class {self.name}>"


class SuperObj(Obj):
    """The value bound to `super`: the same instance, seen from a superclass."""

    def __init__(self, instance: Obj, start: ClassObj):
        super().__init__(start)
        self.instance = instance
        self.start = start

    def get_member(self, interpreter, name: str) -> Obj:
        if name in self.instance.fields:
            return self.instance.fields[name]
        found = self.start.find_method(name)
        if found is not None:
            owner, method = found
            return bind_method(method, self.instance, owner)
        raise LinguaNameError(f"undefined member {name} on {self}", interpreter)

    def set_member(self, interpreter, name: str, value: Obj):
        self.instance.set_member(interpreter, name, value)

    def __str__(self) -> str:
        return f"<super {self.start.name} of {self.instance}>"


# =================================================================
# Primitive values
# =================================================================

class NumberObj(Obj):
    def __init__(self, value: float):
        super().__init__()
        self.value = float(value)

    def __eq__(self, other):
        if not isinstance(other, NumberObj):
            return False
        # NaN equals NaN
        return self.value == other.value or (math.isnan(self.value) and math.isnan(other.value))

    def __hash__(self):
        return hash("nan") if math.isnan(self.value) else hash(self.value)

    def __str__(self) -> str:
        v = self.value
        if v.is_integer():
            return str(int(v))
        return repr(v)


class StringObj(Obj):
    def __init__(self, value: str):
        super().__init__()
        self.value = value

    def __eq__(self, other):
        return isinstance(other, StringObj) and self.value == other.value

    def __hash__(self):
        return hash(self.value)

    def __str__(self) -> str:
        return self.value


class BooleanObj(Obj):
    TRUE: 'BooleanObj'
    FALSE: 'BooleanObj'

    def __init__(self, value: bool):
        super().__init__()
        self.value = bool(value)

    @staticmethod
    def of(value: bool) -> 'BooleanObj':
        return BooleanObj.TRUE if value else BooleanObj.FALSE

    def is_truthy(self) -> bool:
        return self.value

    def __eq__(self, other):
        return isinstance(other, BooleanObj) and self.value == other.value

    def __hash__(self):
        return hash(self.value)

    def __str__(self) -> str:
        return 'true' if self.value else 'false'


BooleanObj.TRUE = BooleanObj(True)
BooleanObj.FALSE = BooleanObj(False)


class NullObj(Obj):
    def is_truthy(self) -> bool:
        return False

    def __eq__(self, other):
        return isinstance(other, NullObj)

    def __hash__(self):
        return hash(None)

    def __str__(self) -> str:
        return 'null'


NULL = NullObj()


class ListObj(Obj):
    def __init__(self, items: Optional[List[Obj]] = None):
        super().__init__()
        self.items: List[Obj] = list(items or [])

    def __eq__(self, other):
        return isinstance(other, ListObj) and self.items == other.items

    __hash__ = None

    def __str__(self) -> str:
        return '[' + ', '.join(str(item) for item in self.items) + ']'


# =================================================================
# Functions
# =================================================================

class FunctionObj(Obj):
    """A closure: name, parameter patterns, an unevaluated body and the
    frame it was defined in.

    Equality looks only at name, parameters and body. The captured frame and
    the self/super bindings do not take part.
    """

    def __init__(self, name: str, params: Sequence[Any], body: Any,
                 captured: Optional[Frame] = None,
                 self_obj: Optional[Obj] = None, super_obj: Optional[Obj] = None):
        super().__init__()
        self.name = name
        self.params = tuple(params)
        self.body = body
        self.captured = captured
        self.self_obj = self_obj
        self.super_obj = super_obj

    def frame_name(self) -> str:
        if self.self_obj is not None:
            return f"{self.self_obj.cls.name}.{self.name}"
        return self.name

    def call(self, interpreter, args: Sequence[Obj]) -> Obj:
        if len(args) != len(self.params):
            raise CallError(f"invalid number of arguments for function {self.name}", interpreter)
        frame = self.match_args(interpreter, args)
        if frame is None:
            raise CallError(f"invalid argument for function {self.name}", interpreter)
        return self.invoke(interpreter, frame)

    def match_args(self, interpreter, args: Sequence[Obj]) -> Optional[Frame]:
        """Matches args against the parameter patterns in a fresh call frame.

        The frame hangs off the captured frame, so pattern expressions see the
        defining scope. Returns the frame with its bindings, or None when the
        arity or any pattern rejects the arguments. The active stack is left
        as it was either way.
        """
        if len(args) != len(self.params):
            return None
        env = interpreter.env
        parent = self.captured if self.captured is not None else env.globals
        frame = Frame(self.frame_name(), parent)
        previous = env.set_stack(frame)
        try:
            if all(p.match(interpreter, frame, a) for p, a in zip(self.params, args)):
                return frame
            return None
        finally:
            env.set_stack(previous)

    def invoke(self, interpreter, frame: Frame) -> Obj:
        """Evaluates the body in a frame already filled by match_args."""
        env = interpreter.env
        previous = env.set_stack(frame)
        interpreter._dbg("push", frame.name, "argc", len(self.params))
        try:
            if self.self_obj is not None:
                frame.define("self", self.self_obj)
            if self.super_obj is not None:
                frame.define("super", self.super_obj)
            return interpreter.evaluate(self.body)
        finally:
            env.set_stack(previous)
            interpreter._dbg("pop", frame.name)

    def is_applicable(self, interpreter, args: Sequence[Obj]) -> bool:
        """Checks arity and patterns without leaving any binding behind."""
        return self.match_args(interpreter, args) is not None

    def with_self(self, self_obj: Obj) -> 'FunctionObj':
        return FunctionObj(self.name, self.params, self.body, self.captured, self_obj, self.super_obj)

    def with_super(self, super_obj: Obj) -> 'FunctionObj':
        return FunctionObj(self.name, self.params, self.body, self.captured, self.self_obj, super_obj)

    def __eq__(self, other):
        if not isinstance(other, FunctionObj):
            return False
        return self.name == other.name and self.params == other.params and self.body == other.body

    def __hash__(self):
        return hash((self.name, self.params, self.body))

    def __str__(self) -> str:
        return f"<function {self.name}>"


class GenericFunctionObj(Obj):
    """An overload set: same-named functions tried in definition order."""

    def __init__(self, name: str, methods: Sequence[FunctionObj]):
        super().__init__()
        self.name = name
        self.methods: Tuple[FunctionObj, ...] = tuple(methods)

    def with_method(self, fn: FunctionObj) -> 'GenericFunctionObj':
        """Returns a new set with fn added, replacing a method with equal parameters."""
        methods = list(self.methods)
        for i, m in enumerate(methods):
            if m.params == fn.params:
                methods[i] = fn
                break
        else:
            methods.append(fn)
        return GenericFunctionObj(self.name, methods)

    def call(self, interpreter, args: Sequence[Obj]) -> Obj:
        # patterns are matched once; the winning frame is reused for the call
        for method in self.methods:
            frame = method.match_args(interpreter, args)
            if frame is not None:
                interpreter._dbg("dispatch", self.name, "->", [str(p) for p in method.params])
                return method.invoke(interpreter, frame)
        raise CallError(f"invalid arguments for function {self.name}", interpreter)

    def is_applicable(self, interpreter, args: Sequence[Obj]) -> bool:
        return any(m.is_applicable(interpreter, args) for m in self.methods)

    def with_self(self, self_obj: Obj) -> 'GenericFunctionObj':
        return GenericFunctionObj(self.name, [m.with_self(self_obj) for m in self.methods])

    def with_super(self, super_obj: Obj) -> 'GenericFunctionObj':
        return GenericFunctionObj(self.name, [m.with_super(super_obj) for m in self.methods])

    def __eq__(self, other):
        return isinstance(other, GenericFunctionObj) and self.name == other.name and self.methods == other.methods

    def __hash__(self):
        return hash((self.name, self.methods))

    def __str__(self) -> str:
        return f"<function {self.name}>"


class NativeFunctionObj(Obj):
    """A function implemented in Python. An arity of None accepts any count."""

    def __init__(self, name: str, fn: Callable[..., Obj], arity: Optional[int] = None):
        super().__init__()
        self.name = name
        self.fn = fn
        self.arity = arity

    def call(self, interpreter, args: Sequence[Obj]) -> Obj:
        if self.arity is not None and len(args) != self.arity:
            raise CallError(f"invalid number of arguments for function {self.name}", interpreter)
        return self.fn(*args)

    def is_applicable(self, interpreter, args: Sequence[Obj]) -> bool:
        return self.arity is None or len(args) == self.arity

    def __str__(self) -> str:
        return f"<function {self.name}>"


# =================================================================
# Built-in classes
# =================================================================

OBJECT_CLASS = ClassObj("Object")
CLASS_CLASS = ClassObj("Class", OBJECT_CLASS, instantiable=False)
NUMBER_CLASS = ClassObj("Number", OBJECT_CLASS, instantiable=False)
STRING_CLASS = ClassObj("String", OBJECT_CLASS, instantiable=False)
BOOLEAN_CLASS = ClassObj("Boolean", OBJECT_CLASS, instantiable=False)
NULL_CLASS = ClassObj("Null", OBJECT_CLASS, instantiable=False)
LIST_CLASS = ClassObj("List", OBJECT_CLASS, instantiable=False)
FUNCTION_CLASS = ClassObj("Function", OBJECT_CLASS, instantiable=False)

Obj.klass = OBJECT_CLASS
ClassObj.klass = CLASS_CLASS
SuperObj.klass = OBJECT_CLASS
NumberObj.klass = NUMBER_CLASS
StringObj.klass = STRING_CLASS
BooleanObj.klass = BOOLEAN_CLASS
NullObj.klass = NULL_CLASS
ListObj.klass = LIST_CLASS
FunctionObj.klass = FUNCTION_CLASS
GenericFunctionObj.klass = FUNCTION_CLASS
NativeFunctionObj.klass = FUNCTION_CLASS

BUILTIN_CLASSES: Dict[str, ClassObj] = {
    cls.name: cls for cls in (
        OBJECT_CLASS, CLASS_CLASS, NUMBER_CLASS, STRING_CLASS, BOOLEAN_CLASS,
        NULL_CLASS, LIST_CLASS, FUNCTION_CLASS,
    )
}
