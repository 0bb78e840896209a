"""Symbol registry, namespace aggregates and the processing driver."""

from phpscope.broker.broker import Broker, ClassTypes, ProcessingReport
from phpscope.broker.namespace import ReflectionNamespace
from phpscope.broker.storage import MemoryStorage

__all__ = [
    "Broker",
    "ClassTypes",
    "MemoryStorage",
    "ProcessingReport",
    "ReflectionNamespace",
]
