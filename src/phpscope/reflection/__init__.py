"""Reflection elements built from token streams.

Parsers for every construct, the composition of inherited and imported
members, the annotation engine and constant value resolution.
"""

from phpscope.reflection.annotation import ReflectionAnnotation, parse_docblock
from phpscope.reflection.base import ReflectionBase, ReflectionElement
from phpscope.reflection.cache import LazyCache
from phpscope.reflection.classes import ReflectionClass
from phpscope.reflection.constant import ReflectionConstant
from phpscope.reflection.fields import ElementField, get_field, supported_fields
from phpscope.reflection.file import ReflectionFile, ReflectionFileNamespace
from phpscope.reflection.functions import ReflectionFunction
from phpscope.reflection.method import ReflectionMethod
from phpscope.reflection.modifiers import Modifier
from phpscope.reflection.parameter import ReflectionParameter
from phpscope.reflection.placeholders import InvalidClass, InvalidConstant, InvalidFunction, UnresolvedClass
from phpscope.reflection.property import ReflectionProperty
from phpscope.reflection.resolver import NOT_RESOLVED, resolve_class_fqn

__all__ = [
    "NOT_RESOLVED",
    "ElementField",
    "InvalidClass",
    "InvalidConstant",
    "InvalidFunction",
    "LazyCache",
    "Modifier",
    "ReflectionAnnotation",
    "ReflectionBase",
    "ReflectionClass",
    "ReflectionConstant",
    "ReflectionElement",
    "ReflectionFile",
    "ReflectionFileNamespace",
    "ReflectionFunction",
    "ReflectionMethod",
    "ReflectionParameter",
    "ReflectionProperty",
    "UnresolvedClass",
    "get_field",
    "parse_docblock",
    "resolve_class_fqn",
    "supported_fields",
]
