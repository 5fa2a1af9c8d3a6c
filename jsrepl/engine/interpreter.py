#!/usr/bin/env python3
# jsrepl/engine/interpreter.py
from __future__ import annotations

"""
Tree-walking evaluator.

Statements run through `execute`, expressions through `evaluate`; both
dispatch on the node class name. Control flow (break/continue/return)
travels as private exceptions, thrown values as JSThrow.
"""

import math
from typing import TYPE_CHECKING, Any, Callable, Optional

from jsrepl.engine import nodes as n
from jsrepl.engine.values import (
    UNDEFINED,
    JSArray,
    JSErrorObject,
    JSFunction,
    JSObject,
    JSThrow,
    array_index,
    loose_equals,
    strict_equals,
    to_boolean,
    to_int32,
    to_number,
    to_primitive,
    to_property_key,
    to_string,
    to_uint32,
    type_of,
)

if TYPE_CHECKING:  # pragma: no cover
    from jsrepl.engine.realm import Realm

MAX_CALL_DEPTH = 256

# Completion marker for statements that produce no value
EMPTY = object()


class _BreakSignal(Exception):
    pass


class _ContinueSignal(Exception):
    pass


class _ReturnSignal(Exception):
    def __init__(self, value: Any) -> None:
        super().__init__()
        self.value = value


class Binding:
    __slots__ = ("value", "mutable")

    def __init__(self, value: Any, mutable: bool = True) -> None:
        self.value = value
        self.mutable = mutable


class Scope:
    """
    One lexical environment.

    Function scopes (and the global scope) collect `var` declarations and
    carry the `this` value; block scopes only hold let/const bindings.
    """

    def __init__(self, parent: Optional["Scope"] = None, *, is_function: bool = False,
                 this: Any = UNDEFINED) -> None:
        self.parent = parent
        self.is_function = is_function or parent is None
        self.this = this
        self.bindings: dict[str, Binding] = {}

    def find(self, name: str) -> Optional[Binding]:
        scope: Optional[Scope] = self
        while scope is not None:
            binding = scope.bindings.get(name)
            if binding is not None:
                return binding
            scope = scope.parent
        return None

    def function_scope(self) -> "Scope":
        scope = self
        while not scope.is_function and scope.parent is not None:
            scope = scope.parent
        return scope

    def root(self) -> "Scope":
        scope = self
        while scope.parent is not None:
            scope = scope.parent
        return scope


class UserFunction(JSFunction):
    """A function defined in source code, closing over its scope."""

    def __init__(self, name: str, params: list[str], body: list[n.Node], closure: Scope,
                 prototype: Optional[JSObject] = None) -> None:
        super().__init__(name, prototype)
        self.params = params
        self.body = body
        self.closure = closure

    def call(self, interp: "Interpreter", this: Any, args: list[Any]) -> Any:
        interp.depth += 1
        try:
            if interp.depth > MAX_CALL_DEPTH:
                raise interp.range_error("Maximum call stack size exceeded")
            scope = Scope(self.closure, is_function=True, this=this)
            for index, param in enumerate(self.params):
                scope.bindings[param] = Binding(args[index] if index < len(args) else UNDEFINED)
            arguments = JSArray(list(args), interp.realm.array_prototype)
            scope.bindings.setdefault("arguments", Binding(arguments))
            interp.hoist_vars(self.body, scope)
            try:
                interp.execute_statements(self.body, scope)
            except _ReturnSignal as signal:
                return signal.value
            return UNDEFINED
        finally:
            interp.depth -= 1


class _Reference:
    """Assignable location produced by an identifier or member expression."""

    def __init__(self, get: Callable[[], Any], put: Callable[[Any], None]) -> None:
        self.get = get
        self.put = put


class Interpreter:
    def __init__(self, realm: "Realm") -> None:
        self.realm = realm
        self.depth = 0
        self._handlers: dict[type, Callable[[Any, Scope], Any]] = {}

    # ---- errors ------------------------------------------------------------

    def make_error(self, name: str, message: str) -> JSErrorObject:
        proto = self.realm.error_prototypes.get(name) or self.realm.error_prototypes["Error"]
        error = JSErrorObject(proto)
        error.set("message", message)
        return error

    def throw_error(self, name: str, message: str) -> JSThrow:
        return JSThrow(self.make_error(name, message))

    def type_error(self, message: str) -> JSThrow:
        return self.throw_error("TypeError", message)

    def reference_error(self, message: str) -> JSThrow:
        return self.throw_error("ReferenceError", message)

    def range_error(self, message: str) -> JSThrow:
        return self.throw_error("RangeError", message)

    # ---- entry point -------------------------------------------------------

    def run(self, program: n.Program) -> Any:
        """Execute a program in the global scope and return its completion value."""
        scope = self.realm.global_scope
        self.depth = 0
        self.hoist_vars(program.body, scope)
        try:
            result = self.execute_statements(program.body, scope)
        except (_BreakSignal, _ContinueSignal):
            raise self.throw_error("SyntaxError", "Illegal break or continue statement") from None
        except _ReturnSignal:
            raise self.throw_error("SyntaxError", "Illegal return statement") from None
        return UNDEFINED if result is EMPTY else result

    # ---- declarations ------------------------------------------------------

    def hoist_vars(self, body: list[n.Node], scope: Scope) -> None:
        for stmt in body:
            self._hoist_var(stmt, scope)

    def _hoist_var(self, stmt: Optional[n.Node], scope: Scope) -> None:
        if stmt is None:
            return
        if isinstance(stmt, n.VarDeclaration):
            if stmt.kind == "var":
                for decl in stmt.declarations:
                    scope.bindings.setdefault(decl.name, Binding(UNDEFINED))
        elif isinstance(stmt, n.BlockStatement):
            self.hoist_vars(stmt.body, scope)
        elif isinstance(stmt, n.IfStatement):
            self._hoist_var(stmt.consequent, scope)
            self._hoist_var(stmt.alternate, scope)
        elif isinstance(stmt, (n.WhileStatement, n.DoWhileStatement)):
            self._hoist_var(stmt.body, scope)
        elif isinstance(stmt, n.ForStatement):
            self._hoist_var(stmt.init, scope)
            self._hoist_var(stmt.body, scope)
        elif isinstance(stmt, n.TryStatement):
            self._hoist_var(stmt.block, scope)
            self._hoist_var(stmt.handler, scope)
            self._hoist_var(stmt.finalizer, scope)

    def _declare_lexical(self, scope: Scope, name: str, value: Any, mutable: bool) -> None:
        # Redeclaring at the top level is allowed so REPL inputs can be re-entered
        if name in scope.bindings and scope.parent is not None:
            raise self.throw_error("SyntaxError", f"Identifier '{name}' has already been declared")
        scope.bindings[name] = Binding(value, mutable)

    def make_function(self, name: str, params: list[str], body: list[n.Node], scope: Scope) -> UserFunction:
        fn = UserFunction(name, params, body, scope, self.realm.function_prototype)
        proto = JSObject(self.realm.object_prototype)
        proto.set("constructor", fn)
        fn.set("prototype", proto)
        return fn

    # ---- statements --------------------------------------------------------

    def execute_statements(self, body: list[n.Node], scope: Scope) -> Any:
        for stmt in body:
            if isinstance(stmt, n.FunctionDeclaration):
                fn = self.make_function(stmt.name, stmt.params, stmt.body, scope)
                scope.bindings[stmt.name] = Binding(fn)
        completion = EMPTY
        for stmt in body:
            value = self.execute(stmt, scope)
            if value is not EMPTY:
                completion = value
        return completion

    def execute(self, node: n.Node, scope: Scope) -> Any:
        return self._dispatch(node, "_exec_")(node, scope)

    def _dispatch(self, node: n.Node, prefix: str) -> Callable[[Any, Scope], Any]:
        key = (prefix, type(node))
        handler = self._handlers.get(key)
        if handler is None:
            handler = getattr(self, prefix + type(node).__name__, None)
            if handler is None:
                if prefix == "_exec_":
                    # expressions are valid wherever a statement is expected
                    handler = self.evaluate
                else:
                    raise TypeError(f"cannot evaluate {type(node).__name__}")
            self._handlers[key] = handler
        return handler

    def _exec_ExpressionStatement(self, node: n.ExpressionStatement, scope: Scope) -> Any:
        return self.evaluate(node.expression, scope)

    def _exec_EmptyStatement(self, node: n.EmptyStatement, scope: Scope) -> Any:
        return EMPTY

    def _exec_FunctionDeclaration(self, node: n.FunctionDeclaration, scope: Scope) -> Any:
        return EMPTY

    def _exec_VarDeclaration(self, node: n.VarDeclaration, scope: Scope) -> Any:
        for decl in node.declarations:
            if node.kind == "var":
                if decl.init is None:
                    continue
                value = self.evaluate(decl.init, scope)
                self._name_function(value, decl.name)
                binding = scope.find(decl.name)
                if binding is None:
                    scope.function_scope().bindings[decl.name] = Binding(value)
                else:
                    binding.value = value
            else:
                value = UNDEFINED if decl.init is None else self.evaluate(decl.init, scope)
                self._name_function(value, decl.name)
                self._declare_lexical(scope, decl.name, value, node.kind == "let")
        return EMPTY

    def _exec_ReturnStatement(self, node: n.ReturnStatement, scope: Scope) -> Any:
        value = UNDEFINED if node.argument is None else self.evaluate(node.argument, scope)
        raise _ReturnSignal(value)

    def _exec_IfStatement(self, node: n.IfStatement, scope: Scope) -> Any:
        if to_boolean(self.evaluate(node.test, scope)):
            result = self.execute(node.consequent, scope)
        elif node.alternate is not None:
            result = self.execute(node.alternate, scope)
        else:
            return UNDEFINED
        return UNDEFINED if result is EMPTY else result

    def _exec_BlockStatement(self, node: n.BlockStatement, scope: Scope) -> Any:
        return self.execute_statements(node.body, Scope(scope))

    def _exec_WhileStatement(self, node: n.WhileStatement, scope: Scope) -> Any:
        completion = UNDEFINED
        while to_boolean(self.evaluate(node.test, scope)):
            try:
                value = self.execute(node.body, scope)
            except _BreakSignal:
                break
            except _ContinueSignal:
                continue
            if value is not EMPTY:
                completion = value
        return completion

    def _exec_DoWhileStatement(self, node: n.DoWhileStatement, scope: Scope) -> Any:
        completion = UNDEFINED
        while True:
            try:
                value = self.execute(node.body, scope)
                if value is not EMPTY:
                    completion = value
            except _BreakSignal:
                break
            except _ContinueSignal:
                pass
            if not to_boolean(self.evaluate(node.test, scope)):
                break
        return completion

    def _exec_ForStatement(self, node: n.ForStatement, scope: Scope) -> Any:
        env = Scope(scope)
        per_iteration: list[str] = []
        if isinstance(node.init, n.VarDeclaration):
            self.execute(node.init, env)
            if node.init.kind == "let":
                per_iteration = [d.name for d in node.init.declarations]
        elif node.init is not None:
            self.evaluate(node.init, env)

        completion = UNDEFINED
        env = self._next_iteration(env, scope, per_iteration)
        while True:
            if node.test is not None and not to_boolean(self.evaluate(node.test, env)):
                break
            try:
                value = self.execute(node.body, env)
                if value is not EMPTY:
                    completion = value
            except _BreakSignal:
                break
            except _ContinueSignal:
                pass
            env = self._next_iteration(env, scope, per_iteration)
            if node.update is not None:
                self.evaluate(node.update, env)
        return completion

    @staticmethod
    def _next_iteration(env: Scope, outer: Scope, names: list[str]) -> Scope:
        # let bindings get a fresh copy per iteration so closures capture each value
        if not names:
            return env
        fresh = Scope(outer)
        for name in names:
            fresh.bindings[name] = Binding(env.bindings[name].value)
        return fresh

    def _exec_BreakStatement(self, node: n.BreakStatement, scope: Scope) -> Any:
        raise _BreakSignal()

    def _exec_ContinueStatement(self, node: n.ContinueStatement, scope: Scope) -> Any:
        raise _ContinueSignal()

    def _exec_ThrowStatement(self, node: n.ThrowStatement, scope: Scope) -> Any:
        raise JSThrow(self.evaluate(node.argument, scope))

    def _exec_TryStatement(self, node: n.TryStatement, scope: Scope) -> Any:
        try:
            result = self.execute(node.block, scope)
        except JSThrow as exc:
            if node.handler is None:
                raise
            catch_scope = Scope(scope)
            if node.param is not None:
                catch_scope.bindings[node.param] = Binding(exc.value)
            result = self.execute(node.handler, catch_scope)
        finally:
            if node.finalizer is not None:
                self.execute(node.finalizer, scope)
        return UNDEFINED if result is EMPTY else result

    # ---- expressions -------------------------------------------------------

    def evaluate(self, node: n.Node, scope: Scope) -> Any:
        return self._dispatch(node, "_eval_")(node, scope)

    def _eval_Literal(self, node: n.Literal, scope: Scope) -> Any:
        return node.value

    def _eval_Identifier(self, node: n.Identifier, scope: Scope) -> Any:
        binding = scope.find(node.name)
        if binding is None:
            raise self.reference_error(f"{node.name} is not defined")
        return binding.value

    def _eval_ThisExpression(self, node: n.ThisExpression, scope: Scope) -> Any:
        return scope.function_scope().this

    def _eval_ArrayExpression(self, node: n.ArrayExpression, scope: Scope) -> Any:
        return JSArray([self.evaluate(e, scope) for e in node.elements], self.realm.array_prototype)

    def _eval_ObjectExpression(self, node: n.ObjectExpression, scope: Scope) -> Any:
        obj = JSObject(self.realm.object_prototype)
        for prop in node.properties:
            value = self.evaluate(prop.value, scope)
            self._name_function(value, prop.key)
            obj.set(prop.key, value)
        return obj

    def _eval_FunctionExpression(self, node: n.FunctionExpression, scope: Scope) -> Any:
        if node.name is None:
            return self.make_function("", node.params, node.body, scope)
        # a named function expression can refer to itself by name
        own = Scope(scope)
        fn = self.make_function(node.name, node.params, node.body, own)
        own.bindings[node.name] = Binding(fn, mutable=False)
        return fn

    def _eval_SequenceExpression(self, node: n.SequenceExpression, scope: Scope) -> Any:
        value = UNDEFINED
        for expression in node.expressions:
            value = self.evaluate(expression, scope)
        return value

    def _eval_ConditionalExpression(self, node: n.ConditionalExpression, scope: Scope) -> Any:
        if to_boolean(self.evaluate(node.test, scope)):
            return self.evaluate(node.consequent, scope)
        return self.evaluate(node.alternate, scope)

    def _eval_LogicalExpression(self, node: n.LogicalExpression, scope: Scope) -> Any:
        left = self.evaluate(node.left, scope)
        if node.operator == "&&":
            return self.evaluate(node.right, scope) if to_boolean(left) else left
        if node.operator == "||":
            return left if to_boolean(left) else self.evaluate(node.right, scope)
        return self.evaluate(node.right, scope) if left is UNDEFINED or left is None else left

    def _eval_UnaryExpression(self, node: n.UnaryExpression, scope: Scope) -> Any:
        op = node.operator
        if op == "typeof":
            if isinstance(node.argument, n.Identifier) and scope.find(node.argument.name) is None:
                return "undefined"
            return type_of(self.evaluate(node.argument, scope))
        if op == "delete":
            if isinstance(node.argument, n.MemberExpression):
                obj = self.evaluate(node.argument.object, scope)
                key = self._member_key(node.argument, scope)
                if isinstance(obj, JSObject):
                    return obj.delete(key)
            else:
                self.evaluate(node.argument, scope)
            return True
        value = self.evaluate(node.argument, scope)
        if op == "void":
            return UNDEFINED
        if op == "!":
            return not to_boolean(value)
        if op == "-":
            return -to_number(value, self)
        if op == "+":
            return to_number(value, self)
        if op == "~":
            return float(~to_int32(to_number(value, self)))
        raise TypeError(f"unknown unary operator {op!r}")

    def _eval_UpdateExpression(self, node: n.UpdateExpression, scope: Scope) -> Any:
        ref = self._reference(node.argument, scope)
        old = to_number(ref.get(), self)
        new = old + 1 if node.operator == "++" else old - 1
        ref.put(new)
        return new if node.prefix else old

    def _eval_BinaryExpression(self, node: n.BinaryExpression, scope: Scope) -> Any:
        left = self.evaluate(node.left, scope)
        right = self.evaluate(node.right, scope)
        return self.binary_op(node.operator, left, right)

    def _eval_AssignmentExpression(self, node: n.AssignmentExpression, scope: Scope) -> Any:
        ref = self._reference(node.target, scope)
        if node.operator == "=":
            value = self.evaluate(node.value, scope)
            if isinstance(node.target, n.Identifier):
                self._name_function(value, node.target.name)
        else:
            current = ref.get()
            value = self.binary_op(node.operator[:-1], current, self.evaluate(node.value, scope))
        ref.put(value)
        return value

    def _eval_MemberExpression(self, node: n.MemberExpression, scope: Scope) -> Any:
        obj = self.evaluate(node.object, scope)
        return self.get_property(obj, self._member_key(node, scope))

    def _eval_CallExpression(self, node: n.CallExpression, scope: Scope) -> Any:
        callee = node.callee
        if isinstance(callee, n.MemberExpression):
            this = self.evaluate(callee.object, scope)
            fn = self.get_property(this, self._member_key(callee, scope))
        else:
            this = UNDEFINED
            fn = self.evaluate(callee, scope)
        args = [self.evaluate(arg, scope) for arg in node.arguments]
        if not isinstance(fn, JSFunction):
            raise self.type_error(f"{_describe(callee)} is not a function")
        return fn.call(self, this, args)

    def _eval_NewExpression(self, node: n.NewExpression, scope: Scope) -> Any:
        fn = self.evaluate(node.callee, scope)
        args = [self.evaluate(arg, scope) for arg in node.arguments]
        if not isinstance(fn, JSFunction):
            raise self.type_error(f"{_describe(node.callee)} is not a constructor")
        self.depth += 1
        try:
            if self.depth > MAX_CALL_DEPTH:
                raise self.range_error("Maximum call stack size exceeded")
            return fn.construct(self, args)
        finally:
            self.depth -= 1

    # ---- references & properties -------------------------------------------

    def _member_key(self, node: n.MemberExpression, scope: Scope) -> str:
        if node.computed:
            return to_property_key(self.evaluate(node.property, scope), self)
        return node.property.name

    def _reference(self, target: n.Node, scope: Scope) -> _Reference:
        if isinstance(target, n.Identifier):
            name = target.name

            def get_binding() -> Any:
                binding = scope.find(name)
                if binding is None:
                    raise self.reference_error(f"{name} is not defined")
                return binding.value

            def put_binding(value: Any) -> None:
                binding = scope.find(name)
                if binding is None:
                    scope.root().bindings[name] = Binding(value)
                elif not binding.mutable:
                    raise self.type_error("Assignment to constant variable.")
                else:
                    binding.value = value

            return _Reference(get_binding, put_binding)

        if isinstance(target, n.MemberExpression):
            obj = self.evaluate(target.object, scope)
            key = self._member_key(target, scope)
            return _Reference(lambda: self.get_property(obj, key),
                              lambda value: self.put_property(obj, key, value))

        raise self.throw_error("SyntaxError", "Invalid left-hand side in assignment")

    def get_property(self, obj: Any, key: str) -> Any:
        if obj is UNDEFINED or obj is None:
            raise self.type_error(
                f"Cannot read properties of {to_string(obj)} (reading '{key}')")
        if isinstance(obj, JSObject):
            return obj.get(key)
        if isinstance(obj, str):
            if key == "length":
                return float(len(obj))
            index = array_index(key)
            if index is not None:
                return obj[index] if index < len(obj) else UNDEFINED
            return self.realm.string_prototype.get(key)
        if isinstance(obj, bool):
            return self.realm.boolean_prototype.get(key)
        return self.realm.number_prototype.get(key)

    def put_property(self, obj: Any, key: str, value: Any) -> None:
        if obj is UNDEFINED or obj is None:
            raise self.type_error(
                f"Cannot set properties of {to_string(obj)} (setting '{key}')")
        if not isinstance(obj, JSObject):
            return
        try:
            obj.set(key, value)
        except ValueError as exc:
            raise self.range_error(str(exc)) from None

    @staticmethod
    def _name_function(value: Any, name: str) -> None:
        if isinstance(value, UserFunction) and not value.name:
            value.name = name

    # ---- operators ---------------------------------------------------------

    def binary_op(self, op: str, left: Any, right: Any) -> Any:
        if op == "+":
            lp = to_primitive(self, left)
            rp = to_primitive(self, right)
            if isinstance(lp, str) or isinstance(rp, str):
                return to_string(lp, self) + to_string(rp, self)
            return to_number(lp, self) + to_number(rp, self)
        if op == "===":
            return strict_equals(left, right)
        if op == "!==":
            return not strict_equals(left, right)
        if op == "==":
            return loose_equals(self, left, right)
        if op == "!=":
            return not loose_equals(self, left, right)
        if op in ("<", ">", "<=", ">="):
            return self._compare(op, left, right)
        if op == "instanceof":
            return self._instance_of(left, right)
        if op == "in":
            if not isinstance(right, JSObject):
                raise self.type_error(
                    f"Cannot use 'in' operator to search for '{to_string(left, self)}' in {to_string(right, self)}")
            return right.has(to_property_key(left, self))

        a = to_number(left, self)
        b = to_number(right, self)
        if op == "-":
            return a - b
        if op == "*":
            return a * b
        if op == "/":
            return _divide(a, b)
        if op == "%":
            return _remainder(a, b)
        if op == "**":
            return _power(a, b)
        if op == "&":
            return float(to_int32(a) & to_int32(b))
        if op == "|":
            return float(to_int32(a) | to_int32(b))
        if op == "^":
            return float(to_int32(a) ^ to_int32(b))
        if op == "<<":
            return float(to_int32(to_int32(a) << (to_uint32(b) & 31)))
        if op == ">>":
            return float(to_int32(a) >> (to_uint32(b) & 31))
        if op == ">>>":
            return float(to_uint32(a) >> (to_uint32(b) & 31))
        raise TypeError(f"unknown binary operator {op!r}")

    def _compare(self, op: str, left: Any, right: Any) -> bool:
        lp = to_primitive(self, left, "number")
        rp = to_primitive(self, right, "number")
        if isinstance(lp, str) and isinstance(rp, str):
            a, b = lp, rp
        else:
            a, b = to_number(lp, self), to_number(rp, self)
            if a != a or b != b:
                return False
        if op == "<":
            return a < b
        if op == ">":
            return a > b
        if op == "<=":
            return a <= b
        return a >= b

    def _instance_of(self, left: Any, right: Any) -> bool:
        if not isinstance(right, JSFunction):
            raise self.type_error("Right-hand side of 'instanceof' is not callable")
        if not isinstance(left, JSObject):
            return False
        proto = right.get("prototype")
        current = left.prototype
        while current is not None:
            if current is proto:
                return True
            current = current.prototype
        return False


def _describe(node: n.Node) -> str:
    if isinstance(node, n.Identifier):
        return node.name
    if isinstance(node, n.MemberExpression) and not node.computed:
        return f"{_describe(node.object)}.{node.property.name}"
    if isinstance(node, n.ThisExpression):
        return "this"
    return "expression"


def _divide(a: float, b: float) -> float:
    if b == 0:
        if a == 0 or a != a:
            return math.nan
        return math.copysign(math.inf, math.copysign(1.0, a) * math.copysign(1.0, b))
    return a / b


def _remainder(a: float, b: float) -> float:
    if b == 0 or a != a or b != b or math.isinf(a):
        return math.nan
    if math.isinf(b):
        return a
    return math.fmod(a, b)


def _power(a: float, b: float) -> float:
    if b != b:
        return math.nan
    if b == 0:
        return 1.0
    if a != a or (abs(a) == 1 and math.isinf(b)):
        return math.nan
    if a == 0 and b < 0:
        odd = b.is_integer() and int(b) % 2 == 1
        return -math.inf if odd and math.copysign(1.0, a) < 0 else math.inf
    try:
        return math.pow(a, b)
    except OverflowError:
        odd = b.is_integer() and int(b) % 2 == 1
        return -math.inf if a < 0 and odd else math.inf
    except ValueError:
        return math.nan
