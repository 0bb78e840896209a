"""Docblock parsing, template merging, copydoc and annotation inheritance."""

from __future__ import annotations

import re
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any, Union

from phpscope.core.models import ElementKind
from phpscope.reflection.cache import recursion_guard
from phpscope.reflection.resolver import resolve_class_fqn

if TYPE_CHECKING:
    from phpscope.reflection.base import ReflectionBase

SHORT_DESCRIPTION = " short_description"
LONG_DESCRIPTION = " long_description"

DOCBLOCK_TEMPLATE_START = "/**#@+"
DOCBLOCK_TEMPLATE_END = "/**#@-*/"

INHERIT_MARKER = "{@inheritdoc}"
COPYDOC = "copydoc"

AnnotationValue = Union[str, list[str]]
Annotations = dict[str, AnnotationValue]

_TAG_RE = re.compile(r"^\s*@(\S+)\s*(.*)")
_LINE_PREFIX_RE = re.compile(r"^\*\s?")
_INHERIT_RE = re.compile(re.escape(INHERIT_MARKER), re.IGNORECASE)
_INHERITING_KINDS = (ElementKind.CLASS, ElementKind.METHOD, ElementKind.PROPERTY)
_COPYING_KINDS = (*_INHERITING_KINDS, ElementKind.FUNCTION, ElementKind.CONSTANT)


def parse_docblock(doc_comment: str | None) -> Annotations:
    """Split a docblock into descriptions and tag lists.

    Free text before the first blank line is the short description, free
    text after it the long description. Every ``@tag rest`` line starts a new
    entry under ``tag``; continuation lines extend the latest entry.
    """
    annotations: dict[str, Any] = {}
    if not doc_comment:
        return annotations

    docblock = doc_comment
    if docblock.startswith(DOCBLOCK_TEMPLATE_START):
        docblock = docblock[len(DOCBLOCK_TEMPLATE_START) :]
    if docblock == DOCBLOCK_TEMPLATE_END:
        docblock = ""
    if docblock.startswith("/**"):
        docblock = docblock[3:]
    if docblock.endswith("*/"):
        docblock = docblock[:-2]
    docblock = docblock.strip()

    name = SHORT_DESCRIPTION
    for raw_line in docblock.split("\n"):
        line = _LINE_PREFIX_RE.sub("", raw_line.strip(), count=1)
        if line == "" and name == SHORT_DESCRIPTION:
            name = LONG_DESCRIPTION
            continue
        match = _TAG_RE.match(line)
        if match:
            name = match.group(1)
            annotations.setdefault(name, []).append(match.group(2))
            continue
        if name in (SHORT_DESCRIPTION, LONG_DESCRIPTION):
            if name not in annotations:
                annotations[name] = line
            else:
                annotations[name] += "\n" + line
        else:
            annotations[name][-1] += "\n" + line

    def clean(value: str) -> str:
        return value.replace("{@*}", "*/").strip()

    return {
        key: clean(value) if isinstance(value, str) else [clean(item) for item in value]
        for key, value in annotations.items()
    }


def merge_templates(
    annotations: Annotations, templates: Sequence[ReflectionAnnotation], doc_comment: str | None
) -> Annotations:
    """Merge active docblock templates into parsed annotations.

    Tags are appended after the template entries, long descriptions are
    prefixed with the template's. Short descriptions are never inherited from
    a template. The innermost template is skipped when it is the element's own
    docblock.
    """
    merged: dict[str, Any] = {key: list(value) if isinstance(value, list) else value for key, value in annotations.items()}
    for index, template in enumerate(templates):
        if index == 0 and template.get_doc_comment() == doc_comment:
            continue
        for name, value in template.get_own_annotations().items():
            if name == LONG_DESCRIPTION:
                if LONG_DESCRIPTION in merged:
                    merged[LONG_DESCRIPTION] = f"{value}\n{merged[LONG_DESCRIPTION]}"
                else:
                    merged[LONG_DESCRIPTION] = value
            elif name != SHORT_DESCRIPTION:
                merged[name] = [*value, *merged.get(name, [])]
    return merged


def _without_copydoc(annotations: Annotations) -> Annotations:
    return {name: value for name, value in annotations.items() if name != COPYDOC}


class ReflectionAnnotation:
    """Annotations of one element.

    Parsing and template merging depend only on the element's own docblock
    and are done once. ``@copydoc`` sources and ancestors may not be
    registered yet, so copying and inheritance go through the broker's lazy
    cache and are only frozen once every source reports complete.
    """

    def __init__(self, reflection: ReflectionBase, doc_comment: str | None = None) -> None:
        self._reflection = reflection
        self._doc_comment = doc_comment or None
        self._templates: tuple[ReflectionAnnotation, ...] = ()
        self._own: Annotations | None = None

    def get_doc_comment(self) -> str | None:
        return self._doc_comment

    def set_templates(self, templates: Sequence[ReflectionAnnotation]) -> ReflectionAnnotation:
        self._templates = tuple(templates)
        self._own = None
        return self

    def get_templates(self) -> tuple[ReflectionAnnotation, ...]:
        return self._templates

    def get_own_annotations(self) -> Annotations:
        """Annotations of the docblock itself plus merged templates."""
        if self._own is None:
            self._own = merge_templates(parse_docblock(self._doc_comment), self._templates, self._doc_comment)
        return self._own

    def get_annotations(self) -> Annotations:
        own = self.get_own_annotations()
        kind = getattr(self._reflection, "kind", None)
        if kind is None or (kind not in _INHERITING_KINDS and COPYDOC not in own):
            return own
        return self._reflection.get_broker().cache.get(self._reflection.element_id, "annotations", self._resolve)

    def has_annotation(self, name: str) -> bool:
        return name in self.get_annotations()

    def get_annotation(self, name: str) -> AnnotationValue | None:
        return self.get_annotations().get(name)

    @recursion_guard(lambda self: (_without_copydoc(self.get_own_annotations()), False))
    def _resolve(self) -> tuple[Annotations, bool]:
        annotations: dict[str, Any] = dict(self.get_own_annotations())
        complete = True
        if COPYDOC in annotations:
            complete = self._copy(annotations)
        if self._reflection.kind in _INHERITING_KINDS:
            annotations = self._inherit(annotations)
            complete = complete and self._reflection.is_complete()
        return annotations, complete

    def _copy(self, annotations: dict[str, Any]) -> bool:
        """Fill missing tags from the elements named by ``@copydoc``.

        Returns:
            False when a named element is not registered yet.
        """
        references = annotations.pop(COPYDOC)
        if self._reflection.kind not in _COPYING_KINDS:
            return True
        complete = True
        for reference in references:
            words = reference.split()
            if not words:
                continue
            source = self._copy_source(words[0])
            if source is None:
                complete = False
                continue
            for name, value in source.get_annotations().items():
                if not annotations.get(name):
                    annotations[name] = value
            complete = complete and source.is_complete()
        return complete

    def _copy_source(self, reference: str) -> Any:
        reflection = self._reflection
        broker = reflection.get_broker()
        kind = reflection.kind
        aliases = reflection.get_namespace_aliases()
        namespace = reflection.get_scope_namespace()

        if kind == ElementKind.CLASS:
            name = resolve_class_fqn(reference, aliases, namespace)
            return broker.get_class(name) if broker.has_class(name) else None

        if kind == ElementKind.FUNCTION or (kind == ElementKind.CONSTANT and reflection.get_declaring_class_name() is None):
            if kind == ElementKind.FUNCTION:
                reference = reference.removesuffix("()")
            exists = broker.has_function if kind == ElementKind.FUNCTION else broker.has_constant
            fetch = broker.get_function if kind == ElementKind.FUNCTION else broker.get_constant
            for name in (resolve_class_fqn(reference, aliases, namespace), reference.lstrip("\\")):
                if exists(name):
                    return fetch(name)
            return None

        if "::" in reference:
            class_name, _, member = reference.partition("::")
            class_name = resolve_class_fqn(class_name, aliases, namespace)
            if not broker.has_class(class_name):
                return None
            owner = broker.get_class(class_name)
        else:
            member = reference
            owner = reflection.get_declaring_class()
        if owner is None or not owner.is_tokenized():
            return None

        if kind == ElementKind.METHOD:
            member = member.removesuffix("()")
            return owner.get_method(member) if owner.has_method(member) else None
        if kind == ElementKind.PROPERTY:
            member = member.lstrip("$")
            return owner.get_property(member) if owner.has_property(member) else None
        return owner.get_constant_reflection(member) if owner.has_constant(member) else None

    def _ancestors(self) -> list[Any]:
        reflection = self._reflection
        if reflection.kind == ElementKind.CLASS:
            declaring_class = reflection
        else:
            declaring_class = reflection.get_declaring_class()
        if declaring_class is None:
            return []

        parents = [declaring_class.get_parent_class(), *declaring_class.get_own_interfaces()]
        parents = [parent for parent in parents if parent is not None and parent.is_tokenized()]
        if reflection.kind == ElementKind.PROPERTY:
            name = reflection.get_name()
            return [parent.get_property(name) for parent in parents if parent.has_property(name)]
        if reflection.kind == ElementKind.METHOD:
            name = reflection.get_name()
            return [parent.get_method(name) for parent in parents if parent.has_method(name)]
        return parents

    def _inherit(self, annotations: dict[str, Any]) -> dict[str, Any]:
        reflection = self._reflection
        parents = self._ancestors()

        if self._doc_comment is None:
            for parent in parents:
                inherited = parent.get_annotations()
                if inherited:
                    annotations = dict(inherited)
                    break
        else:
            for key in (LONG_DESCRIPTION, SHORT_DESCRIPTION):
                text = annotations.get(key)
                if text is None or not _INHERIT_RE.search(text):
                    continue
                for parent in parents:
                    if parent.has_annotation(key):
                        replacement = parent.get_annotation(key)
                        text = _INHERIT_RE.sub(lambda _match: replacement, text)
                        break
                annotations[key] = _INHERIT_RE.sub("", text)

        if reflection.kind == ElementKind.PROPERTY and not annotations.get("var"):
            for parent in parents:
                if parent.has_annotation("var"):
                    annotations["var"] = parent.get_annotation("var")
                    break

        if reflection.kind == ElementKind.METHOD:
            count = reflection.get_number_of_parameters()
            params = list(annotations.get("param", []))
            if count and len(params) < count:
                for parent in parents:
                    if parent.has_annotation("param"):
                        for entry in parent.get_annotation("param")[len(params) :]:
                            if len(params) == count:
                                break
                            params.append(entry)
                    if len(params) == count:
                        break
                if params:
                    annotations["param"] = params
            for tag in ("return", "throws"):
                if tag not in annotations:
                    for parent in parents:
                        if parent.has_annotation(tag):
                            annotations[tag] = parent.get_annotation(tag)
                            break

        return annotations
