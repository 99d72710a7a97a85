from __future__ import annotations

import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Iterator

from tree_sitter import Node, Parser, Tree
from tree_sitter_language_pack import get_parser

from .errors import ParseError

IDENTIFIER_TYPES = {'identifier', 'property_identifier', 'shorthand_property_identifier'}
DECLARATION_TYPES = {'lexical_declaration', 'variable_declaration'}

_SIMPLE_ESCAPES = {
    'n': '\n',
    't': '\t',
    'r': '\r',
    'b': '\b',
    'f': '\f',
    'v': '\v',
    '0': '\0'
}


@lru_cache(maxsize=1)
def _typescript_parser() -> Parser:
    return get_parser('typescript')


@dataclass(frozen=True)
class ParsedModule:
    source: str
    tree: Tree

    @property
    def root(self) -> Node:
        return self.tree.root_node

    def imports(self) -> Iterator[Node]:
        return (node for node in self.root.named_children if node.type == 'import_statement')

    def exports(self) -> Iterator[Node]:
        return (node for node in self.root.named_children if node.type == 'export_statement')


def parse_module(text: str) -> ParsedModule:
    """Parse TypeScript module text. Trees with error or missing nodes are rejected."""
    tree = _typescript_parser().parse(text.encode('utf-8'))
    root = tree.root_node
    if root.has_error:
        line, column = _first_error_position(root)
        raise ParseError(f'module is not valid TypeScript (line {line + 1}, column {column + 1})')
    return ParsedModule(source=text, tree=tree)


def _first_error_position(node: Node) -> tuple[int, int]:
    if node.type == 'ERROR' or node.is_missing:
        return node.start_point
    for child in node.children:
        if child.has_error:
            return _first_error_position(child)
    return node.start_point


def node_text(node: Node) -> str:
    raw = node.text
    return raw.decode('utf-8') if raw is not None else ''


def _unescape(sequence: str) -> str:
    body = sequence[1:]
    if body.startswith('u{') and body.endswith('}'):
        try:
            return chr(int(body[2:-1], 16))
        except ValueError:
            return body
    if len(body) > 1 and body[0] in ('u', 'x'):
        try:
            return chr(int(body[1:], 16))
        except ValueError:
            return body
    if body.startswith(('\r', '\n')):
        # line continuation
        return ''
    return _SIMPLE_ESCAPES.get(body, body)


def string_value(node: Node) -> str:
    parts = [child for child in node.named_children if child.type in ('string_fragment', 'escape_sequence')]
    if not parts:
        return node_text(node)[1:-1]
    value = ''.join(
        _unescape(node_text(part)) if part.type == 'escape_sequence' else node_text(part)
        for part in parts
    )
    # \uD83D\uDE00 style escapes decode to UTF-16 surrogate halves; join them
    # and replace any unpaired half.
    return value.encode('utf-16', 'surrogatepass').decode('utf-16', 'replace')


def _number(text: str) -> int | float | None:
    cleaned = text.replace('_', '').lower()
    if cleaned.endswith('n'):
        cleaned = cleaned[:-1]
    try:
        if cleaned[:2] in ('0x', '0o', '0b'):
            return int(cleaned, 0)
        if len(cleaned) > 1 and cleaned[0] == '0' and cleaned.isdigit():
            # legacy octal unless a digit rules it out
            return int(cleaned, 8) if not set(cleaned) & {'8', '9'} else int(cleaned)
        return float(cleaned)
    except ValueError:
        return None


def number_string(text: str) -> str | None:
    """Render a numeric literal the way JavaScript stringifies its value.

    Zero maps to None like the other falsy literals.
    """
    value = _number(text)
    if value is None:
        return text
    if value == 0:
        return None
    if isinstance(value, int) or (value.is_integer() and abs(value) < 1e21):
        return str(int(value))
    return re.sub(r'e([+-])0*(\d)', r'e\1\2', repr(value))


def literal_value(node: Node | None) -> str | None:
    """Return the value of a string, number or `true` literal.

    Falsy literals (empty string, zero, false, null, undefined) and
    non-literal expressions yield None.
    """
    if node is None:
        return None
    if node.type == 'string':
        return string_value(node) or None
    if node.type == 'number':
        return number_string(node_text(node))
    if node.type == 'true':
        return 'true'
    return None


def identifier_name(node: Node | None) -> str | None:
    if node is None or node.type not in IDENTIFIER_TYPES:
        return None
    return node_text(node) or None


def object_entries(node: Node | None) -> list[Node]:
    if node is None or node.type != 'object':
        return []
    return [child for child in node.named_children if child.type != 'comment']


def property_key(entry: Node) -> str | None:
    if entry.type == 'shorthand_property_identifier':
        return node_text(entry)
    if entry.type != 'pair':
        return None
    key = entry.child_by_field_name('key')
    if key is None:
        return None
    if key.type == 'string':
        return string_value(key) or None
    if key.type in ('property_identifier', 'number'):
        return node_text(key) or None
    return None


def property_value(entry: Node) -> Node | None:
    if entry.type == 'shorthand_property_identifier':
        return entry
    if entry.type != 'pair':
        return None
    return entry.child_by_field_name('value')


def find_property(node: Node | None, name: str) -> Node | None:
    """Value node of the first property keyed `name`, or None."""
    for entry in object_entries(node):
        if property_key(entry) == name:
            return property_value(entry)
    return None


def array_elements(node: Node) -> list[Node]:
    return [child for child in node.named_children if child.type != 'comment']


def first_declarator_value(export: Node) -> Node | None:
    declaration = export.child_by_field_name('declaration')
    if declaration is None or declaration.type not in DECLARATION_TYPES:
        return None
    for child in declaration.named_children:
        if child.type == 'variable_declarator':
            return child.child_by_field_name('value')
    return None


def import_source(statement: Node) -> str | None:
    source = statement.child_by_field_name('source')
    if source is None or source.type != 'string':
        return None
    return string_value(source)


def import_bindings(statement: Node) -> list[str]:
    """Local names bound by an import statement, in source order."""
    names: list[str] = []
    for clause in statement.named_children:
        if clause.type != 'import_clause':
            continue
        for binding in clause.named_children:
            if binding.type == 'identifier':
                names.append(node_text(binding))
            elif binding.type == 'namespace_import':
                names.extend(node_text(child) for child in binding.named_children if child.type == 'identifier')
            elif binding.type == 'named_imports':
                for specifier in binding.named_children:
                    if specifier.type != 'import_specifier':
                        continue
                    local = specifier.child_by_field_name('alias')
                    if local is None:
                        local = specifier.child_by_field_name('name')
                    if local is not None:
                        names.append(node_text(local))
    return names
