"""
A pretty-printer for Lingua values.
"""
from lingua.lingua_datatypes import (
    Obj, ClassObj, NumberObj, StringObj, BooleanObj, NullObj, ListObj,
    FunctionObj, GenericFunctionObj, NativeFunctionObj, SuperObj,
)


class Printer:
    """Formats Lingua values for debugging output; strings are quoted."""

    def __init__(self, indent_width=2):
        self._indent_char = " " * indent_width
        self._handlers = self._create_handlers()

    def pformat(self, obj, level=0):
        """Public entry point to format an object."""
        handler = self._get_handler(obj)
        return handler(obj, level)

    def _get_handler(self, obj):
        obj_type = type(obj)
        if obj_type in self._handlers:
            return self._handlers[obj_type]
        if isinstance(obj, Obj):
            return self._pformat_instance
        return lambda o, l: repr(o)

    def _create_handlers(self):
        return {
            NumberObj: self._pformat_primitive,
            BooleanObj: self._pformat_primitive,
            NullObj: self._pformat_primitive,
            StringObj: self._pformat_str,
            ListObj: self._pformat_list,
            ClassObj: self._pformat_primitive,
            FunctionObj: self._pformat_function,
            GenericFunctionObj: self._pformat_generic_function,
            NativeFunctionObj: self._pformat_primitive,
            SuperObj: self._pformat_primitive,
        }

    def _pformat_primitive(self, obj, level):
        return str(obj)

    def _pformat_str(self, obj, level):
        escaped = obj.value.replace("\\", "\\\\").replace("'", "\\'")
        return f"'{escaped}'"

    def _pformat_list(self, obj, level):
        if not obj.items:
            return "[]"
        parts = [self.pformat(item, level + 1) for item in obj.items]
        flat = "[" + ", ".join(parts) + "]"
        if len(flat) <= 72 and "\n" not in flat:
            return flat
        indent = self._indent_char * (level + 1)
        inner = ",\n".join(f"{indent}{p}" for p in parts)
        return f"[\n{inner}\n{self._indent_char * level}]"

    def _pformat_function(self, obj, level):
        bound = f" bound to {obj.self_obj}" if obj.self_obj is not None else ""
        return f"<function {obj.name}/{len(obj.params)}{bound}>"

    def _pformat_generic_function(self, obj, level):
        return f"<function {obj.name} ({len(obj.methods)} methods)>"

    def _pformat_instance(self, obj, level):
        if not obj.fields:
            return str(obj)
        fields = ", ".join(f"{k}: {self.pformat(v, level + 1)}" for k, v in obj.fields.items())
        return f"<{obj.cls.name} instance {{{fields}}}>"
