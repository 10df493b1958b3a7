"""
Transforms a decoded AST document (plain dicts, lists and scalars) into the
node types the interpreter evaluates.
"""
from typing import Any, List, Optional

from lingua.lingua_ast import (
    Loc, Expr, NumberExpr, StringExpr, InterpolatedStringExpr, BooleanExpr, NullExpr,
    ListExpr, NameExpr, AssignExpr, BlockExpr, IfExpr, WhileExpr, FunctionExpr,
    CallExpr, OperatorExpr, PrefixExpr, MemberExpr, IndexExpr, ClassExpr,
    Pattern, WildcardPattern, NamePattern, LiteralPattern, TypedPattern, ListPattern,
)


class LinguaTransformer:
    def __init__(self, origin: str = "<document>"):
        self.origin = origin

    def _loc(self, node: dict) -> Optional[Loc]:
        line = node.get('line')
        if line is None:
            return None
        if isinstance(line, bool) or not isinstance(line, int):
            raise ValueError(f"line must be an integer, got {line!r}")
        origin = node.get('origin', self.origin)
        if not isinstance(origin, str):
            raise ValueError(f"origin must be a string, got {origin!r}")
        return Loc(line, origin)

    def _field(self, node: dict, key: str) -> Any:
        if key not in node:
            raise ValueError(f"{node.get('node')!r} node is missing {key!r}")
        return node[key]

    def _number(self, node: dict, key: str) -> float:
        value = self._field(node, key)
        if isinstance(value, bool):
            raise ValueError(f"{node.get('node')!r} node has a non-numeric {key!r}: {value!r}")
        try:
            return float(value)
        except (TypeError, ValueError):
            raise ValueError(f"{node.get('node')!r} node has a non-numeric {key!r}: {value!r}") from None

    def _text(self, node: dict, key: str) -> str:
        value = self._field(node, key)
        if isinstance(value, (dict, list)) or value is None:
            raise ValueError(f"{node.get('node') or node.get('pattern')!r} node has a non-scalar {key!r}: {value!r}")
        return str(value)

    def _list(self, node: dict, key: str) -> list:
        items = node.get(key)
        if items is None:
            return []
        if not isinstance(items, list):
            raise ValueError(f"{key!r} must be a list, got {type(items).__name__}")
        return items

    def _many(self, items: Any) -> tuple:
        if items is None:
            return ()
        if not isinstance(items, list):
            raise ValueError(f"expected a list of nodes, got {type(items).__name__}")
        return tuple(self.transform(n) for n in items)

    def transform_program(self, data: Any) -> List[Expr]:
        if data is None:
            return []
        if isinstance(data, list):
            return [self.transform(n) for n in data]
        return [self.transform(data)]

    def transform(self, node: Any) -> Expr:
        # Scalars are literal shorthands
        if node is None:
            return NullExpr()
        if isinstance(node, bool):
            return BooleanExpr(node)
        if isinstance(node, (int, float)):
            return NumberExpr(float(node))
        if not isinstance(node, dict):
            raise ValueError(f"cannot build an expression from {node!r}")

        loc = self._loc(node)
        f = lambda key: self._field(node, key)
        opt = lambda key: self.transform(node[key]) if node.get(key) is not None else None

        match node.get('node'):
            case 'number':
                return NumberExpr(self._number(node, 'value'), loc=loc)
            case 'string':
                return StringExpr(self._text(node, 'value'), loc=loc)
            case 'istring':
                return InterpolatedStringExpr(self._text(node, 'template'), loc=loc)
            case 'boolean':
                return BooleanExpr(bool(f('value')), loc=loc)
            case 'null':
                return NullExpr(loc=loc)
            case 'name':
                return NameExpr(self._text(node, 'name'), loc=loc)
            case 'assign':
                target = self.transform(f('target'))
                if not isinstance(target, (NameExpr, MemberExpr)):
                    raise ValueError("assignment target must be a name or member")
                return AssignExpr(target, self.transform(f('value')), loc=loc)
            case 'block':
                return BlockExpr(self._many(node.get('body')), loc=loc)
            case 'if':
                return IfExpr(self.transform(f('condition')), self.transform(f('then')), opt('else'), loc=loc)
            case 'while':
                return WhileExpr(self.transform(f('condition')), self.transform(f('body')), loc=loc)
            case 'function':
                name = node.get('name')
                if name is not None and not isinstance(name, str):
                    raise ValueError(f"function name must be a string, got {name!r}")
                params = tuple(self.transform_pattern(p) for p in self._list(node, 'params'))
                return FunctionExpr(name, params, self.transform(f('body')), loc=loc)
            case 'call':
                return CallExpr(self.transform(f('callee')), self._many(node.get('args')), loc=loc)
            case 'operator':
                return OperatorExpr(self._text(node, 'op'), self.transform(f('left')), self.transform(f('right')), loc=loc)
            case 'prefix':
                return PrefixExpr(self._text(node, 'op'), self.transform(f('operand')), loc=loc)
            case 'member':
                return MemberExpr(self.transform(f('target')), self._text(node, 'name'), loc=loc)
            case 'index':
                return IndexExpr(self.transform(f('target')), self.transform(f('index')), loc=loc)
            case 'list':
                return ListExpr(self._many(node.get('items')), loc=loc)
            case 'class':
                return ClassExpr(self._text(node, 'name'), opt('superclass'), self._many(node.get('body')), loc=loc)
            case None:
                raise ValueError(f"node mapping without a 'node' kind: {node!r}")
            case kind:
                raise ValueError(f"unknown node kind {kind!r}")

    def transform_pattern(self, node: Any) -> Pattern:
        if isinstance(node, str):
            return WildcardPattern() if node == '_' else NamePattern(node)
        if not isinstance(node, dict):
            raise ValueError(f"cannot build a parameter pattern from {node!r}")

        loc = self._loc(node)
        match node.get('pattern'):
            case 'wildcard':
                return WildcardPattern(loc=loc)
            case 'name':
                return NamePattern(self._text(node, 'name'), loc=loc)
            case 'literal':
                return LiteralPattern(self.transform(self._field(node, 'value')), loc=loc)
            case 'typed':
                return TypedPattern(self._text(node, 'name'), self.transform(self._field(node, 'class')), loc=loc)
            case 'list':
                items = self._list(node, 'items')
                return ListPattern(tuple(self.transform_pattern(p) for p in items), loc=loc)
            case None:
                raise ValueError(f"pattern mapping without a 'pattern' kind: {node!r}")
            case kind:
                raise ValueError(f"unknown pattern kind {kind!r}")
