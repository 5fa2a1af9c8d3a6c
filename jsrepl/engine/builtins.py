#!/usr/bin/env python3
# jsrepl/engine/builtins.py
from __future__ import annotations

"""
Global objects and prototype methods installed into every realm.
"""

import math
import random
import re
from typing import TYPE_CHECKING, Any, Callable, Optional

from jsrepl.engine.values import (
    UNDEFINED,
    JSArray,
    JSErrorObject,
    JSFunction,
    JSObject,
    NativeFunction,
    display,
    error_summary,
    is_number,
    number_to_string,
    strict_equals,
    to_boolean,
    to_int32,
    to_number,
    to_string,
)

if TYPE_CHECKING:  # pragma: no cover
    from jsrepl.engine.interpreter import Interpreter
    from jsrepl.engine.realm import Realm

ERROR_NAMES = ("Error", "TypeError", "ReferenceError", "SyntaxError", "RangeError")


def arg(args: list[Any], index: int) -> Any:
    return args[index] if index < len(args) else UNDEFINED


def _method(realm: "Realm", target: JSObject, name: str, fn: Callable[..., Any]) -> None:
    target.set(name, NativeFunction(name, fn, realm.function_prototype))


def _relative_index(value: Any, length: int, default: int) -> int:
    if value is UNDEFINED:
        return default
    n = to_number(value)
    if n != n:
        return 0
    if n < 0:
        return max(length + int(n), 0) if not math.isinf(n) else 0
    return min(int(n), length) if not math.isinf(n) else length


def _format_log_args(args: list[Any]) -> str:
    return " ".join(a if isinstance(a, str) else display(a) for a in args)


# ---------------------------------------------------------------------------
# Object / Function
# ---------------------------------------------------------------------------

def _install_object(realm: "Realm") -> None:
    proto = realm.object_prototype

    def has_own_property(interp: "Interpreter", this: Any, args: list[Any]) -> Any:
        if not isinstance(this, JSObject):
            return False
        return this.get_own(to_string(arg(args, 0), interp))[0]

    def object_to_string(interp: "Interpreter", this: Any, args: list[Any]) -> Any:
        if isinstance(this, JSArray):
            return "[object Array]"
        return "[object Object]"

    _method(realm, proto, "hasOwnProperty", has_own_property)
    _method(realm, proto, "toString", object_to_string)

    def object_call(interp: "Interpreter", this: Any, args: list[Any]) -> Any:
        value = arg(args, 0)
        if isinstance(value, JSObject):
            return value
        return JSObject(realm.object_prototype)

    ctor = NativeFunction("Object", object_call, realm.function_prototype,
                          lambda interp, args: object_call(interp, UNDEFINED, args))
    ctor.set("prototype", proto)
    proto.set("constructor", ctor)

    def keys(interp: "Interpreter", this: Any, args: list[Any]) -> Any:
        target = arg(args, 0)
        if target is UNDEFINED or target is None:
            raise interp.type_error("Cannot convert undefined or null to object")
        names = target.own_keys() if isinstance(target, JSObject) else []
        return JSArray(list(names), realm.array_prototype)

    _method(realm, ctor, "keys", keys)
    realm.define_global("Object", ctor)

    fproto = realm.function_prototype

    def function_to_string(interp: "Interpreter", this: Any, args: list[Any]) -> Any:
        name = this.name if isinstance(this, JSFunction) else ""
        return f"function {name}() {{ [native code] }}"

    def function_call(interp: "Interpreter", this: Any, args: list[Any]) -> Any:
        if not isinstance(this, JSFunction):
            raise interp.type_error("Function.prototype.call called on non-function")
        return this.call(interp, arg(args, 0), list(args[1:]))

    def function_apply(interp: "Interpreter", this: Any, args: list[Any]) -> Any:
        if not isinstance(this, JSFunction):
            raise interp.type_error("Function.prototype.apply called on non-function")
        extra = arg(args, 1)
        values = list(extra.elements) if isinstance(extra, JSArray) else []
        return this.call(interp, arg(args, 0), values)

    _method(realm, fproto, "toString", function_to_string)
    _method(realm, fproto, "call", function_call)
    _method(realm, fproto, "apply", function_apply)


# ---------------------------------------------------------------------------
# Array
# ---------------------------------------------------------------------------

def _install_array(realm: "Realm") -> None:
    proto = realm.array_prototype

    def this_array(interp: "Interpreter", this: Any, name: str) -> JSArray:
        if not isinstance(this, JSArray):
            raise interp.type_error(f"Array.prototype.{name} called on non-array")
        return this

    def callback(interp: "Interpreter", args: list[Any]) -> JSFunction:
        fn = arg(args, 0)
        if not isinstance(fn, JSFunction):
            raise interp.type_error(f"{display(fn)} is not a function")
        return fn

    def push(interp, this, args):
        array = this_array(interp, this, "push")
        array.elements.extend(args)
        return float(len(array.elements))

    def pop(interp, this, args):
        array = this_array(interp, this, "pop")
        return array.elements.pop() if array.elements else UNDEFINED

    def shift(interp, this, args):
        array = this_array(interp, this, "shift")
        return array.elements.pop(0) if array.elements else UNDEFINED

    def join(interp, this, args):
        array = this_array(interp, this, "join")
        sep = "," if arg(args, 0) is UNDEFINED else to_string(arg(args, 0), interp)
        return sep.join("" if v is UNDEFINED or v is None else to_string(v, interp)
                        for v in array.elements)

    def index_of(interp, this, args):
        array = this_array(interp, this, "indexOf")
        needle = arg(args, 0)
        for i, item in enumerate(array.elements):
            if strict_equals(item, needle):
                return float(i)
        return -1.0

    def includes(interp, this, args):
        array = this_array(interp, this, "includes")
        needle = arg(args, 0)
        return any(strict_equals(item, needle) or (item != item and needle != needle)
                   for item in array.elements)

    def slice_(interp, this, args):
        array = this_array(interp, this, "slice")
        size = len(array.elements)
        start = _relative_index(arg(args, 0), size, 0)
        end = _relative_index(arg(args, 1), size, size)
        return JSArray(array.elements[start:end], realm.array_prototype)

    def concat(interp, this, args):
        array = this_array(interp, this, "concat")
        items = list(array.elements)
        for value in args:
            if isinstance(value, JSArray):
                items.extend(value.elements)
            else:
                items.append(value)
        return JSArray(items, realm.array_prototype)

    def reverse(interp, this, args):
        array = this_array(interp, this, "reverse")
        array.elements.reverse()
        return array

    def for_each(interp, this, args):
        array = this_array(interp, this, "forEach")
        fn = callback(interp, args)
        for i, item in enumerate(list(array.elements)):
            fn.call(interp, UNDEFINED, [item, float(i), array])
        return UNDEFINED

    def map_(interp, this, args):
        array = this_array(interp, this, "map")
        fn = callback(interp, args)
        return JSArray([fn.call(interp, UNDEFINED, [item, float(i), array])
                        for i, item in enumerate(list(array.elements))], realm.array_prototype)

    def filter_(interp, this, args):
        array = this_array(interp, this, "filter")
        fn = callback(interp, args)
        kept = [item for i, item in enumerate(list(array.elements))
                if to_boolean(fn.call(interp, UNDEFINED, [item, float(i), array]))]
        return JSArray(kept, realm.array_prototype)

    def reduce_(interp, this, args):
        array = this_array(interp, this, "reduce")
        fn = callback(interp, args)
        items = list(array.elements)
        if len(args) >= 2:
            acc, start = args[1], 0
        elif items:
            acc, start = items[0], 1
        else:
            raise interp.type_error("Reduce of empty array with no initial value")
        for i in range(start, len(items)):
            acc = fn.call(interp, UNDEFINED, [acc, items[i], float(i), array])
        return acc

    for name, fn in (
        ("push", push), ("pop", pop), ("shift", shift), ("join", join),
        ("indexOf", index_of), ("includes", includes), ("slice", slice_),
        ("concat", concat), ("reverse", reverse), ("forEach", for_each),
        ("map", map_), ("filter", filter_), ("reduce", reduce_),
    ):
        _method(realm, proto, name, fn)
    proto.set("toString", proto.get("join"))

    def array_call(interp: "Interpreter", this: Any, args: list[Any]) -> Any:
        if len(args) == 1 and is_number(args[0]):
            size = args[0]
            if size < 0 or not float(size).is_integer():
                raise interp.range_error("Invalid array length")
            return JSArray([UNDEFINED] * int(size), realm.array_prototype)
        return JSArray(list(args), realm.array_prototype)

    ctor = NativeFunction("Array", array_call, realm.function_prototype,
                          lambda interp, args: array_call(interp, UNDEFINED, args))
    ctor.set("prototype", proto)
    proto.set("constructor", ctor)
    _method(realm, ctor, "isArray", lambda interp, this, args: isinstance(arg(args, 0), JSArray))
    realm.define_global("Array", ctor)


# ---------------------------------------------------------------------------
# String / Number / Boolean
# ---------------------------------------------------------------------------

def _install_string(realm: "Realm") -> None:
    proto = realm.string_prototype

    def this_string(interp: "Interpreter", this: Any) -> str:
        if this is UNDEFINED or this is None:
            raise interp.type_error("String.prototype method called on null or undefined")
        return to_string(this, interp)

    def to_upper(interp, this, args):
        return this_string(interp, this).upper()

    def to_lower(interp, this, args):
        return this_string(interp, this).lower()

    def char_at(interp, this, args):
        text = this_string(interp, this)
        n = to_number(arg(args, 0), interp)
        index = 0 if n != n or math.isinf(n) else int(n)
        return text[index] if 0 <= index < len(text) else ""

    def index_of(interp, this, args):
        return float(this_string(interp, this).find(to_string(arg(args, 0), interp)))

    def includes(interp, this, args):
        return to_string(arg(args, 0), interp) in this_string(interp, this)

    def slice_(interp, this, args):
        text = this_string(interp, this)
        start = _relative_index(arg(args, 0), len(text), 0)
        end = _relative_index(arg(args, 1), len(text), len(text))
        return text[start:end]

    def trim(interp, this, args):
        return this_string(interp, this).strip()

    def split(interp, this, args):
        text = this_string(interp, this)
        sep = arg(args, 0)
        if sep is UNDEFINED:
            parts = [text]
        elif to_string(sep, interp) == "":
            parts = list(text)
        else:
            parts = text.split(to_string(sep, interp))
        return JSArray(parts, realm.array_prototype)

    def value_of(interp, this, args):
        return this_string(interp, this)

    for name, fn in (
        ("toUpperCase", to_upper), ("toLowerCase", to_lower), ("charAt", char_at),
        ("indexOf", index_of), ("includes", includes), ("slice", slice_),
        ("trim", trim), ("split", split), ("toString", value_of), ("valueOf", value_of),
    ):
        _method(realm, proto, name, fn)

    ctor = NativeFunction(
        "String",
        lambda interp, this, args: to_string(args[0], interp) if args else "",
        realm.function_prototype,
    )
    ctor.set("prototype", proto)
    realm.define_global("String", ctor)


def _install_number(realm: "Realm") -> None:
    proto = realm.number_prototype

    def this_number(interp: "Interpreter", this: Any, name: str) -> float:
        if not is_number(this):
            raise interp.type_error(f"Number.prototype.{name} requires that 'this' be a Number")
        return float(this)

    def to_fixed(interp, this, args):
        value = this_number(interp, this, "toFixed")
        digits = int(to_number(arg(args, 0))) if arg(args, 0) is not UNDEFINED else 0
        if not 0 <= digits <= 100:
            raise interp.range_error("toFixed() digits argument must be between 0 and 100")
        if value != value or math.isinf(value):
            return number_to_string(value)
        return format(value, f".{digits}f")

    def number_to_str(interp, this, args):
        value = this_number(interp, this, "toString")
        radix = 10 if arg(args, 0) is UNDEFINED else int(to_number(arg(args, 0)))
        if not 2 <= radix <= 36:
            raise interp.range_error("toString() radix must be between 2 and 36")
        if radix == 10 or not value.is_integer():
            return number_to_string(value)
        digits = "0123456789abcdefghijklmnopqrstuvwxyz"
        n = abs(int(value))
        out = ""
        while True:
            n, rem = divmod(n, radix)
            out = digits[rem] + out
            if n == 0:
                break
        return "-" + out if value < 0 else out

    def value_of(interp, this, args):
        return this_number(interp, this, "valueOf")

    _method(realm, proto, "toFixed", to_fixed)
    _method(realm, proto, "toString", number_to_str)
    _method(realm, proto, "valueOf", value_of)

    ctor = NativeFunction(
        "Number",
        lambda interp, this, args: to_number(args[0], interp) if args else 0.0,
        realm.function_prototype,
    )
    ctor.set("prototype", proto)
    ctor.set("MAX_SAFE_INTEGER", float(2 ** 53 - 1))
    ctor.set("EPSILON", 2.0 ** -52)
    _method(realm, ctor, "isInteger",
            lambda interp, this, args: is_number(arg(args, 0))
            and math.isfinite(arg(args, 0)) and float(arg(args, 0)).is_integer())
    realm.define_global("Number", ctor)

    bproto = realm.boolean_prototype
    _method(realm, bproto, "toString",
            lambda interp, this, args: "true" if this is True else "false")
    _method(realm, bproto, "valueOf", lambda interp, this, args: bool(this))
    bool_ctor = NativeFunction(
        "Boolean", lambda interp, this, args: to_boolean(arg(args, 0)), realm.function_prototype)
    bool_ctor.set("prototype", bproto)
    realm.define_global("Boolean", bool_ctor)


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------

def _install_errors(realm: "Realm") -> None:
    def error_to_string(interp, this, args):
        if not isinstance(this, JSObject):
            raise interp.type_error("Error.prototype.toString called on non-object")
        return error_summary(this)

    base: Optional[JSObject] = None
    for name in ERROR_NAMES:
        proto = JSObject(base or realm.object_prototype)
        proto.set("name", name)
        proto.set("message", "")
        if base is None:
            _method(realm, proto, "toString", error_to_string)
            base = proto
        realm.error_prototypes[name] = proto

        def construct(interp: "Interpreter", args: list[Any], _proto: JSObject = proto) -> Any:
            error = JSErrorObject(_proto)
            if args and args[0] is not UNDEFINED:
                error.set("message", to_string(args[0], interp))
            return error

        ctor = NativeFunction(
            name,
            lambda interp, this, args, _construct=construct: _construct(interp, args),
            realm.function_prototype,
            construct,
        )
        ctor.set("prototype", proto)
        proto.set("constructor", ctor)
        realm.define_global(name, ctor)


# ---------------------------------------------------------------------------
# Math, console and global functions
# ---------------------------------------------------------------------------

def _js_round(x: float) -> float:
    if x != x or math.isinf(x):
        return x
    return float(math.floor(x + 0.5))


def _integral(fn: Callable[[float], int]) -> Callable[[float], float]:
    def apply(x: float) -> float:
        return x if x != x or math.isinf(x) else float(fn(x))
    return apply


def _log(x: float) -> float:
    if x == 0:
        return -math.inf
    return math.log(x)


def _exp(x: float) -> float:
    try:
        return math.exp(x)
    except OverflowError:
        return math.inf


def _unary_math(fn: Callable[[float], float]) -> Callable[..., Any]:
    def wrapper(interp, this, args):
        try:
            return float(fn(to_number(arg(args, 0), interp)))
        except ValueError:
            return math.nan
    return wrapper


def _install_math(realm: "Realm") -> None:
    math_obj = JSObject(realm.object_prototype)
    math_obj.set("PI", math.pi)
    math_obj.set("E", math.e)
    for name, fn in (
        ("abs", abs), ("floor", _integral(math.floor)), ("ceil", _integral(math.ceil)),
        ("trunc", _integral(math.trunc)), ("round", _js_round), ("sqrt", math.sqrt),
        ("log", _log), ("exp", _exp), ("sin", math.sin), ("cos", math.cos), ("tan", math.tan),
    ):
        _method(realm, math_obj, name, _unary_math(fn))

    def sign(interp, this, args):
        x = to_number(arg(args, 0), interp)
        if x != x or x == 0:
            return x
        return 1.0 if x > 0 else -1.0

    def max_(interp, this, args):
        values = [to_number(a, interp) for a in args]
        if any(v != v for v in values):
            return math.nan
        return max(values, default=-math.inf)

    def min_(interp, this, args):
        values = [to_number(a, interp) for a in args]
        if any(v != v for v in values):
            return math.nan
        return min(values, default=math.inf)

    def pow_(interp, this, args):
        return interp.binary_op("**", to_number(arg(args, 0), interp), to_number(arg(args, 1), interp))

    _method(realm, math_obj, "sign", sign)
    _method(realm, math_obj, "max", max_)
    _method(realm, math_obj, "min", min_)
    _method(realm, math_obj, "pow", pow_)
    _method(realm, math_obj, "random", lambda interp, this, args: random.random())
    realm.define_global("Math", math_obj)


def _install_console(realm: "Realm") -> None:
    console = JSObject(realm.object_prototype)

    def log(interp, this, args):
        realm.stdout(_format_log_args(args))
        return UNDEFINED

    def error(interp, this, args):
        realm.stderr(_format_log_args(args))
        return UNDEFINED

    for name, fn in (("log", log), ("info", log), ("error", error), ("warn", error)):
        _method(realm, console, name, fn)
    realm.define_global("console", console)


def _parse_int(interp: "Interpreter", this: Any, args: list[Any]) -> Any:
    text = to_string(arg(args, 0), interp).strip()
    radix = to_int32(to_number(arg(args, 1), interp)) if arg(args, 1) is not UNDEFINED else 0
    sign = 1
    if text and text[0] in "+-":
        sign = -1 if text[0] == "-" else 1
        text = text[1:]
    if radix in (0, 16) and text[:2].lower() == "0x":
        text, radix = text[2:], 16
    if radix == 0:
        radix = 10
    if not 2 <= radix <= 36:
        return math.nan
    digits = "0123456789abcdefghijklmnopqrstuvwxyz"[:radix]
    end = 0
    while end < len(text) and text[end].lower() in digits:
        end += 1
    if end == 0:
        return math.nan
    return float(sign * int(text[:end], radix))


def _parse_float(interp: "Interpreter", this: Any, args: list[Any]) -> Any:
    text = to_string(arg(args, 0), interp).strip()
    match = re.match(r"[+-]?(?:Infinity|(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?)", text)
    if not match:
        return math.nan
    return float(match.group(0).replace("Infinity", "inf"))


def _is_nan(interp: "Interpreter", this: Any, args: list[Any]) -> Any:
    value = to_number(arg(args, 0), interp)
    return value != value


def _install_globals(realm: "Realm") -> None:
    realm.define_global("undefined", UNDEFINED, mutable=False)
    realm.define_global("NaN", math.nan, mutable=False)
    realm.define_global("Infinity", math.inf, mutable=False)
    fp = realm.function_prototype
    realm.define_global("parseInt", NativeFunction("parseInt", _parse_int, fp))
    realm.define_global("parseFloat", NativeFunction("parseFloat", _parse_float, fp))
    realm.define_global("isNaN", NativeFunction("isNaN", _is_nan, fp))
    realm.define_global("isFinite", NativeFunction(
        "isFinite", lambda interp, this, args: math.isfinite(to_number(arg(args, 0), interp)), fp))


def install(realm: "Realm") -> None:
    """Populate a fresh realm's global scope."""
    _install_object(realm)
    _install_array(realm)
    _install_string(realm)
    _install_number(realm)
    _install_errors(realm)
    _install_math(realm)
    _install_console(realm)
    _install_globals(realm)
