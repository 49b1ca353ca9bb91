"""Cyclomatic complexity estimate by counting decision and function nodes."""
import logging
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Dict, List, Optional

from tree_sitter import Node

from codeguardian.config import GuardianConfig
from .discovery import discover_source_files
from .parser import ParseFailure, SourceParser

log = logging.getLogger(__name__)

DECISION_NODES = {
    'if_statement',
    'for_statement',
    'while_statement',
    'do_statement',
    'ternary_expression',
    'catch_clause',
}
FUNCTION_NODES = {
    'function_declaration',
    'generator_function_declaration',
    'function_expression',
    'function',
    'generator_function',
    'arrow_function',
}
LOGICAL_OPERATORS = {'&&', '||', '??'}


@dataclass
class ComplexityReport:
    file: str
    complexity: int
    loc: int
    functions: int

    def to_dict(self) -> Dict:
        return asdict(self)


def count_complexity(root: Node) -> tuple[int, int]:
    """Return (complexity, functions) for a tree."""
    complexity = 0
    functions = 0

    stack = [root]
    while stack:
        node = stack.pop()
        node_type = node.type

        if node_type in DECISION_NODES:
            complexity += 1
        elif node_type == 'switch_case':
            # 'default:' is a separate switch_default node
            complexity += 1
        elif node_type == 'binary_expression':
            operator = node.child_by_field_name('operator')
            if operator is not None and operator.type in LOGICAL_OPERATORS:
                complexity += 1
        elif node_type in FUNCTION_NODES:
            functions += 1
            complexity += 1

        stack.extend(node.named_children)

    return complexity, functions


class ComplexityAnalyzer:
    """Per-file complexity, lines of code and function counts."""

    def __init__(self, config: GuardianConfig):
        self.config = config
        self.parser = SourceParser()

    def analyze_file(self, file_path: str | Path) -> Optional[ComplexityReport]:
        try:
            content = Path(file_path).read_text(encoding='utf-8')
            tree = self.parser.parse_source(content, file_path)
        except (OSError, UnicodeDecodeError, ParseFailure) as e:
            log.debug("No complexity for %s: %s", file_path, e)
            return None

        complexity, functions = count_complexity(tree.root_node)
        return ComplexityReport(
            file=str(file_path),
            complexity=complexity,
            loc=len(content.split('\n')),
            functions=functions,
        )

    def analyze(self, project_root: str | Path) -> List[ComplexityReport]:
        """Analyze every source file, most complex first."""
        files = discover_source_files(
            project_root, self.config.src_dir, self.config.include, self.config.exclude
        )
        results = [report for report in map(self.analyze_file, files) if report]
        return sorted(results, key=lambda r: r.complexity, reverse=True)

    def get_hotspots(self, reports: List[ComplexityReport]) -> List[ComplexityReport]:
        return [r for r in reports if r.complexity > self.config.complexity_threshold]

    def get_stats(self, reports: List[ComplexityReport]) -> Dict[str, int]:
        if not reports:
            return {
                'total_files': 0,
                'average_complexity': 0,
                'max_complexity': 0,
                'total_loc': 0,
                'hotspots': 0,
            }

        total_complexity = sum(r.complexity for r in reports)
        return {
            'total_files': len(reports),
            'average_complexity': round(total_complexity / len(reports)),
            'max_complexity': max(r.complexity for r in reports),
            'total_loc': sum(r.loc for r in reports),
            'hotspots': len(self.get_hotspots(reports)),
        }
