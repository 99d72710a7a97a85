from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from tree_sitter import Node

from .errors import ParseError
from .module_parser import (
    ParsedModule,
    array_elements,
    find_property,
    first_declarator_value,
    identifier_name,
    literal_value,
    object_entries,
    property_key,
    property_value
)


@dataclass
class Provider:
    name: str | None
    url: str | None


@dataclass
class Chain:
    info: str | None
    text: str | None
    color: str | None
    logo: str | None
    network: str
    providers: list[Provider] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            'info': self.info,
            'text': self.text,
            'color': self.color,
            'logo': self.logo,
            'providers': [{'name': p.name, 'url': p.url} for p in self.providers],
            'network': self.network
        }


def find_chain_array(module: ParsedModule) -> Node | None:
    # First exported array wins; the binding name is not checked.
    for export in module.exports():
        value = first_declarator_value(export)
        if value is not None and value.type == 'array':
            return value
    return None


def _providers(node: Node | None) -> list[Provider]:
    return [
        Provider(name=property_key(entry), url=literal_value(property_value(entry)))
        for entry in object_entries(node)
    ]


def _chain_from_element(element: Node, assets: dict[str, str], network: str) -> Chain:
    ui = find_property(element, 'ui')
    color = literal_value(find_property(ui, 'color'))
    logo_name = identifier_name(find_property(ui, 'logo'))

    return Chain(
        info=literal_value(find_property(element, 'info')),
        text=literal_value(find_property(element, 'text')),
        color=color,
        logo=assets.get(logo_name) if logo_name else None,
        network=network,
        providers=_providers(find_property(element, 'providers'))
    )


def extract_chains(module: ParsedModule, assets: dict[str, str], network: str) -> list[Chain]:
    array = find_chain_array(module)
    if array is None:
        return []

    chains: list[Chain] = []
    for index, element in enumerate(array_elements(array)):
        if element.type != 'object':
            line = element.start_point[0] + 1
            raise ParseError(f'chain entry #{index} at line {line} is {element.type}, expected an object literal')
        chains.append(_chain_from_element(element, assets, network))
    return chains
