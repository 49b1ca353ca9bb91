"""Symbol model extraction from JS/TS syntax trees."""
import re
from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Dict, List, Set

from tree_sitter import Node, Tree


@dataclass(frozen=True)
class ImportEntry:
    """One import specifier, keyed by its local binding."""
    local_name: str  # Post-alias name (import { a as b } -> 'b')
    source: str
    line: int  # 1-based
    column: int  # 0-based
    is_default: bool = False
    is_namespace: bool = False


@dataclass
class SymbolModel:
    """Per-file usage model: imports, references, exports and JSX presence."""
    imports: List[ImportEntry] = field(default_factory=list)
    used_identifiers: Set[str] = field(default_factory=set)
    exported_names: Set[str] = field(default_factory=set)
    has_jsx: bool = False

    def to_dict(self) -> Dict:
        data = asdict(self)
        data['used_identifiers'] = sorted(self.used_identifiers)
        data['exported_names'] = sorted(self.exported_names)
        return data


class NodeKind(Enum):
    """Closed set of node kinds the extractor reacts to."""
    IMPORT = 'import'
    EXPORT = 'export'
    JSX = 'jsx'
    IDENTIFIER = 'identifier'
    KEYED_PAIR = 'keyed_pair'
    MEMBER_CHAIN = 'member_chain'
    OTHER = 'other'


NODE_KINDS = {
    'import_statement': NodeKind.IMPORT,
    'export_statement': NodeKind.EXPORT,
    'jsx_element': NodeKind.JSX,
    'jsx_self_closing_element': NodeKind.JSX,
    'jsx_fragment': NodeKind.JSX,
    'identifier': NodeKind.IDENTIFIER,
    'property_identifier': NodeKind.IDENTIFIER,
    'shorthand_property_identifier': NodeKind.IDENTIFIER,
    'shorthand_property_identifier_pattern': NodeKind.IDENTIFIER,
    'type_identifier': NodeKind.IDENTIFIER,
    'private_property_identifier': NodeKind.IDENTIFIER,
    'statement_identifier': NodeKind.IDENTIFIER,
    'pair': NodeKind.KEYED_PAIR,
    'pair_pattern': NodeKind.KEYED_PAIR,
    'member_expression': NodeKind.MEMBER_CHAIN,
    'nested_identifier': NodeKind.MEMBER_CHAIN,
    'nested_type_identifier': NodeKind.MEMBER_CHAIN,
}

# Declarations whose 'name' field is the exported binding
NAMED_DECLARATIONS = {
    'function_declaration',
    'generator_function_declaration',
    'class_declaration',
    'abstract_class_declaration',
    'interface_declaration',
    'type_alias_declaration',
    'enum_declaration',
    'function_signature',
    'internal_module',
    'module',
}
VARIABLE_DECLARATIONS = {'lexical_declaration', 'variable_declaration'}

_DOTTED_NAME = re.compile(r'^[\w$]+(?:\.[\w$#]+)+$')


def node_text(node: Node) -> str:
    return node.text.decode('utf-8')


def strip_quotes(text: str) -> str:
    return text.strip('"\'`')


class SymbolModelExtractor:
    """Build a SymbolModel from a parsed tree in a single traversal.

    Every identifier occurrence counts as a use, declaration sites included,
    except the bindings of import specifiers and non-computed keys of
    object literals and object patterns.
    """

    def extract(self, tree: Tree) -> SymbolModel:
        model = SymbolModel()

        # Reversed pushes keep pre-order, so imports come out in source order
        stack = [tree.root_node]
        while stack:
            node = stack.pop()
            children = self._visit(node, model)
            stack.extend(reversed(children))

        return model

    def _visit(self, node: Node, model: SymbolModel) -> List[Node]:
        """Record what node contributes and return the children to descend into."""
        kind = NODE_KINDS.get(node.type, NodeKind.OTHER)

        if kind is NodeKind.IMPORT:
            self._collect_imports(node, model)
            # Specifier bindings are not references
            return []

        if kind is NodeKind.EXPORT:
            self._collect_exports(node, model)
        elif kind is NodeKind.JSX:
            model.has_jsx = True
        elif kind is NodeKind.IDENTIFIER:
            model.used_identifiers.add(node_text(node))
        elif kind is NodeKind.KEYED_PAIR:
            key = node.child_by_field_name('key')
            if key is not None and key.type == 'property_identifier':
                return [child for child in node.children if child.start_byte != key.start_byte]
        elif kind is NodeKind.MEMBER_CHAIN:
            dotted = node_text(node).replace('?.', '.')
            dotted = ''.join(dotted.split())
            if _DOTTED_NAME.match(dotted):
                model.used_identifiers.add(dotted)

        return node.children

    def _collect_imports(self, node: Node, model: SymbolModel):
        source_node = node.child_by_field_name('source')
        if source_node is None:
            # import x = require('y') and friends
            return
        source = strip_quotes(node_text(source_node))

        for clause in node.children:
            if clause.type != 'import_clause':
                continue
            for child in clause.named_children:
                if child.type == 'identifier':
                    self._add_import(model, child, child, source, is_default=True)
                elif child.type == 'namespace_import':
                    local = next((c for c in child.named_children if c.type == 'identifier'), None)
                    if local is not None:
                        self._add_import(model, child, local, source, is_namespace=True)
                elif child.type == 'named_imports':
                    for specifier in child.named_children:
                        if specifier.type != 'import_specifier':
                            continue
                        local = specifier.child_by_field_name('alias') or specifier.child_by_field_name('name')
                        if local is not None and local.type == 'identifier':
                            self._add_import(model, specifier, local, source)

    @staticmethod
    def _add_import(model: SymbolModel, anchor: Node, local: Node, source: str,
                    is_default: bool = False, is_namespace: bool = False):
        local_name = node_text(local)
        if not local_name:
            return
        row, column = anchor.start_point
        model.imports.append(ImportEntry(
            local_name=local_name,
            source=source,
            line=row + 1,
            column=column,
            is_default=is_default,
            is_namespace=is_namespace,
        ))

    def _collect_exports(self, node: Node, model: SymbolModel):
        for child in node.children:
            if child.type == 'default':
                model.exported_names.add('default')
                return

        declaration = node.child_by_field_name('declaration')
        if declaration is not None:
            self._collect_declaration_names(declaration, model.exported_names)

        for child in node.named_children:
            if child.type == 'export_clause':
                for specifier in child.named_children:
                    if specifier.type != 'export_specifier':
                        continue
                    exported = specifier.child_by_field_name('alias') or specifier.child_by_field_name('name')
                    if exported is not None:
                        model.exported_names.add(strip_quotes(node_text(exported)))
            elif child.type == 'namespace_export':
                # export * as ns from 'mod'
                for name in child.named_children:
                    model.exported_names.add(strip_quotes(node_text(name)))

    def _collect_declaration_names(self, declaration: Node, names: Set[str]):
        if declaration.type == 'ambient_declaration':
            for child in declaration.named_children:
                self._collect_declaration_names(child, names)
        elif declaration.type in VARIABLE_DECLARATIONS:
            for declarator in declaration.named_children:
                if declarator.type == 'variable_declarator':
                    name_node = declarator.child_by_field_name('name')
                    if name_node is not None:
                        self._collect_pattern_names(name_node, names)
        elif declaration.type in NAMED_DECLARATIONS:
            name_node = declaration.child_by_field_name('name')
            if name_node is not None:
                names.add(strip_quotes(node_text(name_node)))

    def _collect_pattern_names(self, pattern: Node, names: Set[str]):
        """Bound names of a declarator target, destructuring included."""
        if pattern.type == 'identifier' or pattern.type == 'shorthand_property_identifier_pattern':
            names.add(node_text(pattern))
            return
        if pattern.type == 'pair_pattern':
            value = pattern.child_by_field_name('value')
            if value is not None:
                self._collect_pattern_names(value, names)
            return
        if pattern.type in {'assignment_pattern', 'object_assignment_pattern'}:
            # Default values on the right are expressions, not bindings
            left = pattern.child_by_field_name('left')
            if left is not None:
                self._collect_pattern_names(left, names)
            return
        for child in pattern.named_children:
            self._collect_pattern_names(child, names)
