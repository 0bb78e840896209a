"""Tokenizer backed by tree-sitter-php.

The concrete syntax tree produced by tree-sitter is flattened back into a
linear token sequence: leaves are emitted in document order, the text
between two leaves becomes a whitespace token, and a handful of node kinds
(strings, comments, variables, numbers) are emitted whole.
"""

from __future__ import annotations

import logging
from functools import lru_cache

import tree_sitter_php as tsphp
from tree_sitter import Language, Node, Parser

from phpscope.stream.tokens import MAGIC_CONSTANTS, T, Token, classify_comment, classify_word

logger = logging.getLogger(__name__)

_ATOMIC_NODES: dict[str, T | None] = {
    "string": T.CONSTANT_ENCAPSED_STRING,
    "encapsed_string": T.CONSTANT_ENCAPSED_STRING,
    "shell_command_expression": T.CONSTANT_ENCAPSED_STRING,
    "heredoc": T.HEREDOC,
    "nowdoc": T.HEREDOC,
    "variable_name": T.VARIABLE,
    "integer": T.LNUMBER,
    "float": T.DNUMBER,
    "text": T.INLINE_HTML,
    "php_tag": T.OPEN_TAG,
    "comment": None,
}


@lru_cache
def _get_parser() -> Parser:
    return Parser(Language(tsphp.language_php()))


def _leaf_type(node: Node, text: str) -> str:
    if node.type in _ATOMIC_NODES:
        kind = _ATOMIC_NODES[node.type]
        return classify_comment(text) if kind is None else kind
    if node.type == "?>":
        return T.CLOSE_TAG
    if node.type == "name":
        return MAGIC_CONSTANTS.get(text.lower(), T.STRING)
    return classify_word(text)


def _iter_leaves(root: Node):
    stack = [root]
    while stack:
        node = stack.pop()
        if node.type in _ATOMIC_NODES or node.child_count == 0:
            if node.end_byte > node.start_byte:
                yield node
            continue
        stack.extend(reversed(node.children))


def tokenize(source: str) -> list[Token]:
    """Split PHP source into tokens.

    Args:
        source: PHP source code (may include inline HTML).

    Returns:
        Tokens in document order; concatenating their values gives back the
        line-ending normalised source.
    """
    source = source.replace("\r\n", "\n").replace("\r", "\n")
    content = source.encode("utf-8")
    tree = _get_parser().parse(content)

    tokens: list[Token] = []
    offset = 0
    line = 1
    for leaf in _iter_leaves(tree.root_node):
        if leaf.start_byte < offset:
            # Overlapping leaves only appear inside error recovery regions.
            continue
        if leaf.start_byte > offset:
            gap = content[offset : leaf.start_byte].decode("utf-8", errors="replace")
            gap_type = T.WHITESPACE if gap.isspace() else classify_word(gap.strip())
            tokens.append(Token(gap_type, gap, line))
        text = content[leaf.start_byte : leaf.end_byte].decode("utf-8", errors="replace")
        tokens.append(Token(_leaf_type(leaf, text), text, leaf.start_point[0] + 1))
        offset = leaf.end_byte
        line = leaf.end_point[0] + 1

    if offset < len(content):
        tail = content[offset:].decode("utf-8", errors="replace")
        tokens.append(Token(T.WHITESPACE if tail.isspace() else T.INLINE_HTML, tail, line))

    if tree.root_node.has_error:
        logger.debug("Source contains syntax errors; tokens were recovered from an error tree")
    return tokens
