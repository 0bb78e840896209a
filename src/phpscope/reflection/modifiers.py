"""Modifier bit flags shared by classes, methods and properties.

The values of the flags PHP itself exposes match the runtime reflection
constants so that modifier masks can be compared with a live runtime.
"""

from __future__ import annotations

from enum import IntFlag


class Modifier(IntFlag):
    STATIC = 0x1
    ABSTRACT = 0x2
    FINAL = 0x4
    IMPLEMENTED_ABSTRACT = 0x8
    IMPLICIT_ABSTRACT = 0x10
    EXPLICIT_ABSTRACT = 0x20
    FINAL_CLASS = 0x40
    INTERFACE = 0x80
    PUBLIC = 0x100
    PROTECTED = 0x200
    PRIVATE = 0x400
    ACCESS_LEVEL_CHANGED = 0x800
    CONSTRUCTOR = 0x2000
    DESTRUCTOR = 0x4000
    CLONE = 0x8000
    ALLOWED_STATIC = 0x10000
    IMPLEMENTS_INTERFACES = 0x80000
    IMPLEMENTS_TRAITS = 0x400000


NONE = Modifier(0)
VISIBILITY = Modifier.PUBLIC | Modifier.PROTECTED | Modifier.PRIVATE
COMPUTED = Modifier.ACCESS_LEVEL_CHANGED | Modifier.IMPLEMENTED_ABSTRACT

_VISIBILITY_RANK = {Modifier.PRIVATE: 0, Modifier.PROTECTED: 1, Modifier.PUBLIC: 2}


def visibility_of(modifiers: int) -> Modifier:
    """Return the single visibility bit of a modifier mask (public by default)."""
    for flag in (Modifier.PRIVATE, Modifier.PROTECTED, Modifier.PUBLIC):
        if modifiers & flag:
            return flag
    return Modifier.PUBLIC


def is_wider(modifiers: int, than: int) -> bool:
    """Tell whether ``modifiers`` grants wider access than ``than``."""
    return _VISIBILITY_RANK[visibility_of(modifiers)] > _VISIBILITY_RANK[visibility_of(than)]


def modifier_names(modifiers: int) -> list[str]:
    """Render a modifier mask the way PHP's ``Reflection::getModifierNames`` does."""
    names = []
    if modifiers & (Modifier.ABSTRACT | Modifier.EXPLICIT_ABSTRACT):
        names.append("abstract")
    if modifiers & (Modifier.FINAL | Modifier.FINAL_CLASS):
        names.append("final")
    if modifiers & Modifier.PUBLIC:
        names.append("public")
    elif modifiers & Modifier.PROTECTED:
        names.append("protected")
    elif modifiers & Modifier.PRIVATE:
        names.append("private")
    if modifiers & Modifier.STATIC:
        names.append("static")
    return names
