"""
Gas Analyzer for Stylus contracts

Line-level scan for storage and memory patterns that waste gas in Stylus
(Rust/WASM) contracts, plus a light overview of public functions and
state variables.
"""

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Pattern, Tuple

logger = logging.getLogger(__name__)


STORAGE_SAVINGS = 5000
MEMORY_SAVINGS = 2000


class OptimizationCategory(Enum):
    """Kind of gas optimization"""
    STORAGE = "storage"
    MEMORY = "memory"


class MemoryPatternType(Enum):
    """Memory usage patterns"""
    ALLOCATION_INTENSIVE = "allocation_intensive"
    NESTED_ITERATIONS = "nested_iterations"
    TEMPORARY_ALLOCATIONS = "temporary_allocations"
    UNOPTIMIZED_CACHING = "unoptimized_caching"


@dataclass
class GasOptimization:
    """A gas optimization opportunity on one line"""
    line: int
    description: str
    suggestion: str
    estimated_savings: int
    category: OptimizationCategory

    def to_dict(self) -> Dict[str, Any]:
        return {
            'line': self.line,
            'description': self.description,
            'suggestion': self.suggestion,
            'estimated_savings': self.estimated_savings,
            'category': self.category.value,
        }


@dataclass
class MemoryAnalysis:
    """A memory usage observation on one line"""
    line: int
    description: str
    suggestion: str
    pattern_type: MemoryPatternType


class StylusGasAnalyzer:
    """Analyzes gas and memory usage patterns in Stylus source"""

    def __init__(self, content: str):
        self.content = content
        self.storage_patterns = self._compile(self._initialize_storage_patterns())
        self.memory_patterns = self._compile(self._initialize_memory_patterns())
        self.memory_usage_patterns = self._compile(self._initialize_memory_usage_patterns())
        self.detailed_memory_patterns = self._compile(self._initialize_detailed_memory_patterns())

    def _initialize_storage_patterns(self) -> List[Dict[str, Any]]:
        """Initialize patterns for repeated storage access"""
        return [
            {
                'pattern': r'self\.balances\.get\([^)]*\).*self\.balances\.get\([^)]*\)',
                'description': 'Multiple storage reads of balances map',
                'suggestion': 'Cache balance values in local variables when accessed multiple times',
                'type': OptimizationCategory.STORAGE,
            },
            {
                'pattern': r'self\.holders\.get\([^)]*\).*self\.holders\.get\([^)]*\)',
                'description': 'Multiple reads from holders vector',
                'suggestion': 'Cache holder addresses in memory when used multiple times',
                'type': OptimizationCategory.STORAGE,
            },
            {
                'pattern': r'for.*in.*0.*\.\..*self\.(holders|balances)\.get\([^)]*\)',
                'description': 'Storage reads in loop',
                'suggestion': 'Batch storage reads before loop iteration to reduce gas costs',
                'type': OptimizationCategory.STORAGE,
            },
        ]

    def _initialize_memory_patterns(self) -> List[Dict[str, Any]]:
        """Initialize patterns for wasteful allocation"""
        return [
            {
                'pattern': r'let\s+mut\s+balances\s*=\s*Vec::new\(\)',
                'description': 'Unallocated vector initialization for balances',
                'suggestion': 'Pre-allocate vector with estimated holder count: Vec::with_capacity(holders.len())',
                'type': OptimizationCategory.MEMORY,
            },
            {
                'pattern': r'\.clone\(\)|\.cloned\(\)',
                'description': 'Unnecessary cloning of data',
                'suggestion': 'Use references instead of cloning where possible',
                'type': OptimizationCategory.MEMORY,
            },
            {
                'pattern': r'push\([^)]*\)',
                'description': 'Vector pushing without pre-allocation',
                'suggestion': 'Pre-allocate vector capacity to avoid reallocation costs',
                'type': OptimizationCategory.MEMORY,
            },
        ]

    def _initialize_memory_usage_patterns(self) -> List[Dict[str, Any]]:
        return [
            {
                'pattern': r'for\s+.*\s+in\s+0\s*\.\.\s*self\.holders\.len\(\)',
                'description': 'Linear iteration over holders',
                'suggestion': 'Consider using a more efficient data structure or index for holder lookup',
                'type': MemoryPatternType.NESTED_ITERATIONS,
            },
            {
                'pattern': r'Vec::new\(\).*push\(',
                'description': 'Dynamic vector growth in a single expression',
                'suggestion': 'Pre-allocate vector: Vec::with_capacity(holders.len())',
                'type': MemoryPatternType.ALLOCATION_INTENSIVE,
            },
            {
                'pattern': r'self\.balances\.get\(&[^)]*\).*self\.balances\.get\(&[^)]*\)',
                'description': 'Multiple map accesses without caching',
                'suggestion': 'Cache map values in local variables to reduce memory operations',
                'type': MemoryPatternType.UNOPTIMIZED_CACHING,
            },
            {
                'pattern': r'\.cloned\(\)|\.clone\(\)',
                'description': 'Cloning in storage operations',
                'suggestion': 'Use references instead of cloning data where possible',
                'type': MemoryPatternType.TEMPORARY_ALLOCATIONS,
            },
        ]

    def _initialize_detailed_memory_patterns(self) -> List[Dict[str, Any]]:
        return [
            {
                'pattern': r'Option<.*>\.cloned\(\)',
                'description': 'Option value cloning',
                'suggestion': 'Use as_ref() before cloning Option contents',
                'type': MemoryPatternType.TEMPORARY_ALLOCATIONS,
            },
            {
                'pattern': r'self\.holders\.get\(.*\).*\.clone\(\)',
                'description': 'Storage vector element cloning',
                'suggestion': 'Cache holder addresses before processing',
                'type': MemoryPatternType.ALLOCATION_INTENSIVE,
            },
        ]

    @staticmethod
    def _compile(patterns: List[Dict[str, Any]]) -> List[Tuple[Pattern, Dict[str, Any]]]:
        compiled = []
        for entry in patterns:
            try:
                compiled.append((re.compile(entry['pattern']), entry))
            except re.error as e:
                logger.warning("Skipping invalid pattern %r: %s", entry['pattern'], e)
        return compiled

    def _scan(self, patterns):
        """Yield (line number, pattern entry) for every matching line."""
        for line_num, line in enumerate(self.content.splitlines(), start=1):
            for regex, entry in patterns:
                if regex.search(line):
                    yield line_num, entry

    def analyze(self) -> List[GasOptimization]:
        """Storage findings first, then memory findings, each in line order."""
        optimizations: List[GasOptimization] = []
        for patterns, savings in ((self.storage_patterns, STORAGE_SAVINGS),
                                  (self.memory_patterns, MEMORY_SAVINGS)):
            for line_num, entry in self._scan(patterns):
                optimizations.append(GasOptimization(
                    line=line_num,
                    description=entry['description'],
                    suggestion=entry['suggestion'],
                    estimated_savings=savings,
                    category=entry['type'],
                ))
        return optimizations

    def analyze_memory_usage(self, detailed: bool = False) -> List[MemoryAnalysis]:
        pattern_sets = [self.memory_usage_patterns]
        if detailed:
            pattern_sets.append(self.detailed_memory_patterns)

        analyses: List[MemoryAnalysis] = []
        for patterns in pattern_sets:
            for line_num, entry in self._scan(patterns):
                analyses.append(MemoryAnalysis(
                    line=line_num,
                    description=entry['description'],
                    suggestion=entry['suggestion'],
                    pattern_type=entry['type'],
                ))
        return analyses

    def total_estimated_savings(self) -> int:
        return sum(o.estimated_savings for o in self.analyze())

    def extract_functions(self) -> List[str]:
        """Names of ``pub fn`` items in source order."""
        return re.findall(r'pub\s+fn\s+([a-zA-Z_][a-zA-Z0-9_]*)\s*\([^)]*\)', self.content)

    def extract_state_variables(self) -> List[str]:
        """``name: Type`` strings for public fields."""
        return [
            f"{name}: {type_name}"
            for name, type_name in re.findall(
                r'pub\s+([a-zA-Z_][a-zA-Z0-9_]*)\s*:\s*([a-zA-Z_][a-zA-Z0-9_<>]*)', self.content
            )
        ]
