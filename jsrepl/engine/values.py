#!/usr/bin/env python3
# jsrepl/engine/values.py
from __future__ import annotations

"""
Runtime value model and the language's type conversions.

Primitive values map onto Python objects:
    undefined -> UNDEFINED   null -> None   boolean -> bool
    number -> float          string -> str
Objects are JSObject instances (arrays and functions are subclasses).
"""

import json
import math
import re
from decimal import Decimal
from typing import TYPE_CHECKING, Any, Callable, Optional

if TYPE_CHECKING:  # pragma: no cover
    from jsrepl.engine.interpreter import Interpreter


class _Undefined:
    _instance: Optional["_Undefined"] = None

    def __new__(cls) -> "_Undefined":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "undefined"

    def __bool__(self) -> bool:
        return False


UNDEFINED = _Undefined()


class JSThrow(Exception):
    """A value thrown by `throw` (or by the runtime) travelling up the stack."""

    def __init__(self, value: Any) -> None:
        super().__init__(value)
        self.value = value


# ---------------------------------------------------------------------------
# Objects
# ---------------------------------------------------------------------------

class JSObject:
    class_name = "Object"

    def __init__(self, prototype: Optional["JSObject"] = None) -> None:
        self.prototype = prototype
        self.properties: dict[str, Any] = {}

    def get_own(self, key: str) -> tuple[bool, Any]:
        if key in self.properties:
            return True, self.properties[key]
        return False, UNDEFINED

    def get(self, key: str) -> Any:
        obj: Optional[JSObject] = self
        while obj is not None:
            found, value = obj.get_own(key)
            if found:
                return value
            obj = obj.prototype
        return UNDEFINED

    def has(self, key: str) -> bool:
        obj: Optional[JSObject] = self
        while obj is not None:
            if obj.get_own(key)[0]:
                return True
            obj = obj.prototype
        return False

    def set(self, key: str, value: Any) -> None:
        self.properties[key] = value

    def delete(self, key: str) -> bool:
        self.properties.pop(key, None)
        return True

    def own_keys(self) -> list[str]:
        return list(self.properties)

    def is_error(self) -> bool:
        return self.class_name == "Error"


class JSArray(JSObject):
    class_name = "Array"

    def __init__(self, elements: list[Any], prototype: Optional[JSObject] = None) -> None:
        super().__init__(prototype)
        self.elements = elements

    def get_own(self, key: str) -> tuple[bool, Any]:
        if key == "length":
            return True, float(len(self.elements))
        index = array_index(key)
        if index is not None:
            if index < len(self.elements):
                return True, self.elements[index]
            return False, UNDEFINED
        return super().get_own(key)

    def set(self, key: str, value: Any) -> None:
        if key == "length":
            length = to_number(value)
            if length != length or length < 0 or not float(length).is_integer():
                raise ValueError("Invalid array length")
            size = int(length)
            del self.elements[size:]
            self.elements.extend([UNDEFINED] * (size - len(self.elements)))
            return
        index = array_index(key)
        if index is None:
            super().set(key, value)
            return
        if index >= len(self.elements):
            self.elements.extend([UNDEFINED] * (index + 1 - len(self.elements)))
        self.elements[index] = value

    def delete(self, key: str) -> bool:
        index = array_index(key)
        if index is not None:
            if index < len(self.elements):
                self.elements[index] = UNDEFINED
            return True
        return super().delete(key)

    def own_keys(self) -> list[str]:
        return [str(i) for i in range(len(self.elements))] + super().own_keys()


class JSFunction(JSObject):
    """Base class for callables; subclasses implement call()."""

    class_name = "Function"

    def __init__(self, name: str, prototype: Optional[JSObject] = None) -> None:
        super().__init__(prototype)
        self.name = name

    def call(self, interp: "Interpreter", this: Any, args: list[Any]) -> Any:
        raise NotImplementedError

    def construct(self, interp: "Interpreter", args: list[Any]) -> Any:
        proto = self.get("prototype")
        obj = JSObject(proto if isinstance(proto, JSObject) else interp.realm.object_prototype)
        result = self.call(interp, obj, args)
        return result if isinstance(result, JSObject) else obj


class JSErrorObject(JSObject):
    class_name = "Error"


NativeCallable = Callable[["Interpreter", Any, list[Any]], Any]


class NativeFunction(JSFunction):
    """
    Function implemented in Python.

    `fn(interp, this, args)` implements calls; `constructor(interp, args)`,
    when given, makes the function usable with `new`.
    """

    def __init__(
        self,
        name: str,
        fn: NativeCallable,
        prototype: Optional[JSObject] = None,
        constructor: Optional[Callable[["Interpreter", list[Any]], Any]] = None,
    ) -> None:
        super().__init__(name, prototype)
        self.fn = fn
        self.constructor = constructor

    def call(self, interp: "Interpreter", this: Any, args: list[Any]) -> Any:
        return self.fn(interp, this, args)

    def construct(self, interp: "Interpreter", args: list[Any]) -> Any:
        if self.constructor is None:
            raise interp.type_error(f"{self.name or 'anonymous'} is not a constructor")
        return self.constructor(interp, args)


# ---------------------------------------------------------------------------
# Type helpers
# ---------------------------------------------------------------------------

_ARRAY_INDEX_RE = re.compile(r"0|[1-9][0-9]*")


def array_index(key: str) -> Optional[int]:
    if _ARRAY_INDEX_RE.fullmatch(key):
        return int(key)
    return None


def is_number(value: Any) -> bool:
    return isinstance(value, float) or (isinstance(value, int) and not isinstance(value, bool))


def type_of(value: Any) -> str:
    """The `typeof` result for a value."""
    if value is UNDEFINED:
        return "undefined"
    if value is None:
        return "object"
    if isinstance(value, bool):
        return "boolean"
    if is_number(value):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, JSFunction):
        return "function"
    return "object"


def _type_tag(value: Any) -> str:
    # like type_of, except null gets its own tag and functions count as objects
    if value is None:
        return "null"
    tag = type_of(value)
    return "object" if tag == "function" else tag


# ---------------------------------------------------------------------------
# Conversions
# ---------------------------------------------------------------------------

_NUMERIC_STRING_RE = re.compile(
    r"[+-]?(?:(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?|Infinity)")
_PREFIXED_INT_RE = re.compile(r"0[xX][0-9a-fA-F]+|0[oO][0-7]+|0[bB][01]+")


def to_boolean(value: Any) -> bool:
    if value is UNDEFINED or value is None:
        return False
    if isinstance(value, bool):
        return value
    if is_number(value):
        return not (value == 0 or value != value)
    if isinstance(value, str):
        return value != ""
    return True


def string_to_number(text: str) -> float:
    s = text.strip()
    if s == "":
        return 0.0
    if _PREFIXED_INT_RE.fullmatch(s):
        return float(int(s[2:], {"x": 16, "o": 8, "b": 2}[s[1].lower()]))
    if _NUMERIC_STRING_RE.fullmatch(s):
        return float(s.replace("Infinity", "inf"))
    return math.nan


def to_primitive(interp: "Interpreter", value: Any, hint: str = "default") -> Any:
    """Convert objects to primitives, honouring valueOf/toString methods."""
    if not isinstance(value, JSObject):
        return value
    order = ("toString", "valueOf") if hint == "string" else ("valueOf", "toString")
    for name in order:
        method = value.get(name)
        if isinstance(method, JSFunction):
            result = method.call(interp, value, [])
            if not isinstance(result, JSObject):
                return result
    raise interp.type_error("Cannot convert object to primitive value")


def to_number(value: Any, interp: Optional["Interpreter"] = None) -> float:
    if value is UNDEFINED:
        return math.nan
    if value is None:
        return 0.0
    if isinstance(value, bool):
        return 1.0 if value else 0.0
    if is_number(value):
        return float(value)
    if isinstance(value, str):
        return string_to_number(value)
    if interp is None:
        return math.nan
    return to_number(to_primitive(interp, value, "number"), interp)


def number_to_string(value: float) -> str:
    if value != value:
        return "NaN"
    if value in (math.inf, -math.inf):
        return "Infinity" if value > 0 else "-Infinity"
    if value == 0:
        return "0"
    text = repr(float(value))
    if float(value).is_integer() and abs(value) < 1e21:
        return format(Decimal(text), "f") if "e" in text else str(int(value))
    if "e" in text:
        if 1e-6 <= abs(value) < 1e21:
            return format(Decimal(text), "f")
        mantissa, exponent = text.split("e")
        sign = "-" if exponent.startswith("-") else "+"
        return f"{mantissa}e{sign}{exponent.lstrip('+-').lstrip('0') or '0'}"
    return text


def to_string(value: Any, interp: Optional["Interpreter"] = None) -> str:
    if value is UNDEFINED:
        return "undefined"
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if is_number(value):
        return number_to_string(float(value))
    if isinstance(value, str):
        return value
    if interp is None:
        return _object_to_string(value)
    return to_string(to_primitive(interp, value, "string"), interp)


def _object_to_string(obj: JSObject) -> str:
    if isinstance(obj, JSArray):
        return ",".join("" if v is UNDEFINED or v is None else to_string(v) for v in obj.elements)
    if isinstance(obj, JSFunction):
        return f"function {obj.name}() {{ [native code] }}"
    if obj.is_error():
        return error_summary(obj)
    return "[object Object]"


def to_int32(value: float) -> int:
    if value != value or value in (math.inf, -math.inf):
        return 0
    n = int(value) & 0xFFFFFFFF
    return n - 0x100000000 if n >= 0x80000000 else n


def to_uint32(value: float) -> int:
    if value != value or value in (math.inf, -math.inf):
        return 0
    return int(value) & 0xFFFFFFFF


def to_property_key(value: Any, interp: Optional["Interpreter"] = None) -> str:
    return to_string(value, interp)


# ---------------------------------------------------------------------------
# Equality
# ---------------------------------------------------------------------------

def strict_equals(a: Any, b: Any) -> bool:
    if _type_tag(a) != _type_tag(b):
        return False
    if isinstance(a, JSObject):
        return a is b
    if a is UNDEFINED or a is None:
        return True
    return a == b


def loose_equals(interp: "Interpreter", a: Any, b: Any) -> bool:
    ta, tb = _type_tag(a), _type_tag(b)
    if ta == tb:
        return strict_equals(a, b)
    if ta in ("null", "undefined") and tb in ("null", "undefined"):
        return True
    if ta in ("null", "undefined") or tb in ("null", "undefined"):
        return False
    if ta == "number" and tb == "string":
        return float(a) == string_to_number(b)
    if ta == "string" and tb == "number":
        return string_to_number(a) == float(b)
    if ta == "boolean":
        return loose_equals(interp, to_number(a), b)
    if tb == "boolean":
        return loose_equals(interp, a, to_number(b))
    if ta == "object":
        return loose_equals(interp, to_primitive(interp, a), b)
    if tb == "object":
        return loose_equals(interp, a, to_primitive(interp, b))
    return False


# ---------------------------------------------------------------------------
# Display
# ---------------------------------------------------------------------------

def error_summary(obj: JSObject) -> str:
    name = to_string(obj.get("name"))
    message = to_string(obj.get("message"))
    return f"{name}: {message}" if message else name


def _quote(text: str) -> str:
    return json.dumps(text, ensure_ascii=False)


def display(value: Any) -> str:
    """
    Render a value the way the REPL prints results.

    Strings are quoted, arrays and objects are expanded one level at a
    time and cycles print as [Circular].
    """
    return _display(value, set())


def _display(value: Any, seen: set[int]) -> str:
    if isinstance(value, str):
        return _quote(value)
    if not isinstance(value, JSObject):
        return to_string(value)
    if isinstance(value, JSFunction):
        return f"[Function: {value.name}]" if value.name else "[Function (anonymous)]"
    if value.is_error():
        return error_summary(value)
    if id(value) in seen:
        return "[Circular]"
    seen = seen | {id(value)}
    if isinstance(value, JSArray):
        items = [_display(v, seen) for v in value.elements]
        extra = [f"{_key(k)}: {_display(v, seen)}" for k, v in value.properties.items()]
        parts = items + extra
        return f"[ {', '.join(parts)} ]" if parts else "[]"
    parts = [f"{_key(k)}: {_display(v, seen)}" for k, v in value.properties.items()]
    return f"{{ {', '.join(parts)} }}" if parts else "{}"


_PLAIN_KEY_RE = re.compile(r"[$A-Za-z_][$A-Za-z0-9_]*")


def _key(key: str) -> str:
    return key if _PLAIN_KEY_RE.fullmatch(key) else _quote(key)
