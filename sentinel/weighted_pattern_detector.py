"""
Weighted Multi-Signal Pattern Detector

Combines several heuristic signals per risk category into a single
confidence value. Each signal starts from a fixed base confidence, is
raised by fixed increments when corroborating evidence is present (or
mitigating evidence is absent), is multiplied by its category weight and
clamped to [0, 1]. Signals whose confidence is strictly above the
learning threshold become exactly one vulnerability each.

Computed signal lists are cached per detector instance. The cache is
guarded by a lock so one detector can be shared by parallel rule workers.
"""

import hashlib
import logging
import re
import threading
from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Tuple

from sentinel.access_control_detector import OWNER_CHECK_MARKERS
from sentinel.audit_rule import AuditRule, contains_any
from sentinel.contract_ir import ParsedContract
from sentinel.vulnerabilities import Severity, Vulnerability

logger = logging.getLogger(__name__)


DEFAULT_LEARNING_THRESHOLD = 0.80
DEFAULT_PREFIX_LENGTH = 100
OVERSIZED_STRUCT_FIELDS = 5

CACHE_KEY_FULL = "full"
CACHE_KEY_PREFIX = "prefix"
CACHE_KEY_MODES = (CACHE_KEY_FULL, CACHE_KEY_PREFIX)

DEFAULT_PATTERN_WEIGHTS: Dict[str, float] = {
    # Core security
    'access_control': 1.2,
    'memory_safety': 1.3,
    'reentrancy': 1.25,
    'arithmetic_safety': 1.15,
    'dos': 1.1,
    'input_validation': 1.1,
    # L2 cost
    'batch_operations': 1.1,
    'calldata_compression': 1.2,
    'state_packing': 1.1,
    # Stylus / ecosystem
    'stylus_pattern': 1.2,
    'event_validation': 1.1,
    'upgrade_safety': 1.2,
    'cross_chain': 1.3,
    'timestamp_dependence': 1.1,
}


@dataclass(frozen=True)
class PatternSignal:
    """A weighted signal as produced by the detector."""
    pattern: str
    category: str
    confidence: float


# ---------------------------------------------------------------------------
# Weight table
# ---------------------------------------------------------------------------

class PatternWeightTable:
    """Read-only mapping of category key to weight multiplier."""

    def __init__(self, overrides: Optional[Mapping[str, float]] = None):
        weights = dict(DEFAULT_PATTERN_WEIGHTS)
        for key, value in (overrides or {}).items():
            weight = float(value)
            if weight <= 1.0:
                raise ValueError(f"Pattern weight for '{key}' must be greater than 1.0, got {value}")
            weights[key.lower()] = weight
        self._weights = MappingProxyType(weights)

    def weight_for(self, category: str) -> float:
        return self._weights.get(category.lower(), 1.0)

    def as_dict(self) -> Dict[str, float]:
        return dict(self._weights)

    def __getitem__(self, category: str) -> float:
        return self._weights[category.lower()]

    def __contains__(self, category: str) -> bool:
        return category.lower() in self._weights

    def __len__(self) -> int:
        return len(self._weights)


# ---------------------------------------------------------------------------
# Cache
# ---------------------------------------------------------------------------

class DetectorCache:
    """Lock-guarded signal cache.

    In ``full`` mode the key is a SHA-256 of the whole content plus a marker
    for the structural IR summary. In ``prefix`` mode the key is the first
    ``prefix_length`` characters only, so two inputs sharing a prefix share
    a cached result.
    """

    def __init__(self, key_mode: str = CACHE_KEY_FULL, prefix_length: int = DEFAULT_PREFIX_LENGTH):
        if key_mode not in CACHE_KEY_MODES:
            raise ValueError(f"Unknown cache key mode '{key_mode}', expected one of {CACHE_KEY_MODES}")
        self.key_mode = key_mode
        self.prefix_length = prefix_length
        self._entries: Dict[str, Tuple[PatternSignal, ...]] = {}
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0

    def make_key(self, content: str, contract: Optional[ParsedContract] = None) -> str:
        if self.key_mode == CACHE_KEY_PREFIX:
            return content[:self.prefix_length]
        digest = hashlib.sha256(content.encode('utf-8')).hexdigest()
        return f"{digest}:{_ir_marker(contract)}"

    def get(self, key: str) -> Optional[Tuple[PatternSignal, ...]]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self.misses += 1
            else:
                self.hits += 1
            return entry

    def put(self, key: str, signals: Tuple[PatternSignal, ...]) -> None:
        with self._lock:
            self._entries[key] = signals

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self.hits = 0
            self.misses = 0

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


def _ir_marker(contract: Optional[ParsedContract]) -> str:
    if contract is None:
        return "noir"
    widest = max((s.field_count for s in contract.structures), default=0)
    return f"{contract.dialect.value}:{len(contract.functions)}:{widest}"


# ---------------------------------------------------------------------------
# Pattern -> vulnerability mapping
# ---------------------------------------------------------------------------

PATTERN_FINDINGS: Dict[str, Tuple[str, Severity, str, str]] = {
    "Access Control Risk": (
        "Missing Access Control", Severity.HIGH,
        "Functions can be called by unauthorized users",
        "Implement role-based access control using Stylus SDK",
    ),
    "Memory Safety Risk": (
        "Memory Safety Issue", Severity.CRITICAL,
        "Memory corruption risk from unsafe operations",
        "Replace unsafe operations with safe alternatives",
    ),
    "Reentrancy Risk": (
        "Reentrancy Vulnerability", Severity.CRITICAL,
        "Contract state manipulation risk in external calls",
        "Implement reentrancy guards for external calls",
    ),
    "Integer Overflow Risk": (
        "Integer Overflow Risk", Severity.HIGH,
        "Arithmetic operations lack overflow protection",
        "Use checked arithmetic operations for all calculations",
    ),
    "Unbounded Iteration": (
        "Unbounded Loop DoS Risk", Severity.MEDIUM,
        "Loops over dynamically sized collections can exceed the block gas limit",
        "Bound iteration with a maximum size or paginate the operation",
    ),
    "Input Validation Risk": (
        "Missing Input Validation", Severity.MEDIUM,
        "Public functions accept parameters without validating them",
        "Validate all external inputs with require!/ensure! checks",
    ),
    "Batch Operations": (
        "Unoptimized Batch Operations", Severity.MEDIUM,
        "Higher gas costs from unoptimized loops",
        "Implement batch processing for loop operations",
    ),
    "Calldata Optimization": (
        "Unoptimized Calldata", Severity.MEDIUM,
        "Uncompressed calldata increases L1 posting costs",
        "Implement calldata compression for large data structures",
    ),
    "State Packing": (
        "Inefficient State Packing", Severity.LOW,
        "Increased storage costs from unpacked data",
        "Implement storage packing strategies for contract state",
    ),
    "Oversized Structure": (
        "Large Structure Layout", Severity.LOW,
        "Structures with many fields occupy multiple storage slots",
        "Split large structures or order fields to share storage slots",
    ),
    "Stylus SDK Usage": (
        "Missing Stylus Entrypoint", Severity.MEDIUM,
        "Stylus SDK is used without a declared contract entrypoint",
        "Annotate the contract with #[entrypoint] or #[stylus_sdk::contract]",
    ),
    "Event Validation": (
        "Missing Event Emission", Severity.LOW,
        "State change without event emission",
        "Emit events for all important state transitions",
    ),
    "Upgrade Safety Risk": (
        "Unprotected Upgrade Path", Severity.HIGH,
        "Upgrade or initialization logic can be invoked more than once",
        "Guard initialization with an initializer flag and restrict upgrades",
    ),
    "Cross-Chain Risk": (
        "Insufficient Cross-Chain Verification", Severity.CRITICAL,
        "Cross-chain message without proper verification",
        "Add proper verification for all cross-chain messages",
    ),
    "Timestamp Dependence": (
        "Timestamp Dependence", Severity.MEDIUM,
        "Block values are used where miners or sequencers can influence them",
        "Avoid block.timestamp and block.number for randomness or tight timing",
    ),
}

_LOOP_RE = re.compile(r'\b(?:for|while|loop)\b')
_REENTRANCY_GUARDS = ("mutex", "nonReentrant", "ReentrancyGuard", "lock")
_ROLE_MARKERS = ("onlyRole", "hasRole", "has_role", "AccessControl")
_RUST_PARAM_FN = re.compile(r'pub fn\s+\w+\s*\(\s*(?:&(?:mut\s+)?self\s*,\s*)?\w+\s*:')
_SOL_PARAM_FN = re.compile(r'function\s+\w+\s*\(\s*\w[^)]*\)[^{;]*\b(?:public|external)\b')


# ---------------------------------------------------------------------------
# Detector
# ---------------------------------------------------------------------------

class WeightedPatternDetector(AuditRule):
    """Confidence-scored multi-signal detector."""

    name = "Weighted Multi-Signal Pattern Analyzer"
    rule_id = "weighted_patterns"

    def __init__(self,
                 pattern_weights: Optional[Mapping[str, float]] = None,
                 learning_threshold: float = DEFAULT_LEARNING_THRESHOLD,
                 cache_key_mode: str = CACHE_KEY_FULL,
                 cache_prefix_length: int = DEFAULT_PREFIX_LENGTH):
        self.weights = PatternWeightTable(pattern_weights)
        self.learning_threshold = learning_threshold
        self.cache = DetectorCache(cache_key_mode, cache_prefix_length)

    # ------------------------------------------------------------------
    # AuditRule
    # ------------------------------------------------------------------

    def check(self, content: str, contract: Optional[ParsedContract] = None) -> List[Vulnerability]:
        findings: List[Vulnerability] = []
        for signal in self.analyze(content, contract):
            if signal.confidence <= self.learning_threshold:
                continue
            template = PATTERN_FINDINGS.get(signal.pattern)
            if template is None:
                continue
            name, severity, description, recommendation = template
            findings.append(self.finding(name, severity, description, recommendation))
        return findings

    # ------------------------------------------------------------------
    # Signal computation
    # ------------------------------------------------------------------

    def analyze(self, content: str, contract: Optional[ParsedContract] = None) -> Tuple[PatternSignal, ...]:
        """Return weighted signals for ``content``, using the cache when possible."""
        key = self.cache.make_key(content, contract)
        cached = self.cache.get(key)
        if cached is not None:
            return cached

        raw: List[Tuple[str, str, float]] = []
        self._detect_security_patterns(content, contract, raw)
        self._detect_l2_patterns(content, contract, raw)
        self._detect_stylus_patterns(content, contract, raw)

        signals = tuple(self._apply_weight(pattern, category, conf) for pattern, category, conf in raw)
        self.cache.put(key, signals)
        logger.debug("Weighted detector computed %d signals", len(signals))
        return signals

    def _apply_weight(self, pattern: str, category: str, confidence: float) -> PatternSignal:
        weighted = confidence * self.weights.weight_for(category)
        return PatternSignal(pattern, category, min(1.0, max(0.0, weighted)))

    def _detect_security_patterns(self, content: str, contract: Optional[ParsedContract], out: List) -> None:
        # an owner check or an access_control attribute removes the signal
        if _has_public_surface(content, contract) and not contains_any(
                content, "#[access_control", *OWNER_CHECK_MARKERS):
            confidence = 0.75
            if not contains_any(content, *_ROLE_MARKERS):
                confidence += 0.10
            out.append(("Access Control Risk", "access_control", confidence))

        if contains_any(content, "unsafe", "*mut", "*const"):
            confidence = 0.8
            if not contains_any(content, "Box<", "Rc<"):
                confidence += 0.1
            if "transmute" in content:
                confidence += 0.1
            out.append(("Memory Safety Risk", "memory_safety", confidence))

        if contains_any(content, "external_call", "send", ".call"):
            confidence = 0.8
            if not contains_any(content, *_REENTRANCY_GUARDS):
                confidence += 0.1
            if "self." in content:
                confidence += 0.05
            out.append(("Reentrancy Risk", "reentrancy", confidence))

        if contains_any(content, "u256", "u128", "U256", "unchecked"):
            confidence = 0.75
            if not contains_any(content, "checked_add", "checked_mul", "checked_sub", "SafeMath"):
                confidence += 0.15
            if "unchecked" in content:
                confidence += 0.2
            out.append(("Integer Overflow Risk", "arithmetic_safety", confidence))

        if _LOOP_RE.search(content) and contains_any(content, ".len()", ".length"):
            confidence = 0.75
            if not contains_any(content, "MAX_", "limit", "break"):
                confidence += 0.15
            out.append(("Unbounded Iteration", "dos", confidence))

        if _has_parameterised_entry(content, contract):
            confidence = 0.75
            if not contains_any(content, "require", "ensure!", "assert"):
                confidence += 0.15
            if not contains_any(content, "address(0)", "Address::ZERO", "is_zero"):
                confidence += 0.05
            out.append(("Input Validation Risk", "input_validation", confidence))

    def _detect_l2_patterns(self, content: str, contract: Optional[ParsedContract], out: List) -> None:
        if "loop" in content or "for " in content:
            confidence = 0.75
            if "batch" not in content:
                confidence += 0.15
            out.append(("Batch Operations", "batch_operations", confidence))

        if contains_any(content, "calldata", "input"):
            confidence = 0.75
            if not contains_any(content, "compress", "packed"):
                confidence += 0.15
            out.append(("Calldata Optimization", "calldata_compression", confidence))

        if contains_any(content, "struct", "StorageMap"):
            confidence = 0.75
            if "packed" not in content:
                confidence += 0.15
            out.append(("State Packing", "state_packing", confidence))

        if contract is not None:
            widest = max((s.field_count for s in contract.structures), default=0)
            if widest > OVERSIZED_STRUCT_FIELDS:
                confidence = 0.75
                if widest > 2 * OVERSIZED_STRUCT_FIELDS:
                    confidence += 0.05
                out.append(("Oversized Structure", "state_packing", confidence))

    def _detect_stylus_patterns(self, content: str, contract: Optional[ParsedContract], out: List) -> None:
        if "stylus_sdk" in content:
            confidence = 0.75
            if not contains_any(content, "#[entrypoint]", "#[stylus_sdk::contract]"):
                confidence += 0.15
            out.append(("Stylus SDK Usage", "stylus_pattern", confidence))

        if "&mut self" in content or (contract is not None and contract.public_functions()):
            confidence = 0.75
            if not contains_any(content, "emit", "log!", "evm::log"):
                confidence += 0.15
            out.append(("Event Validation", "event_validation", confidence))

        if contains_any(content, "delegatecall", "upgradeTo", "proxy", "initialize"):
            confidence = 0.75
            if not contains_any(content, "initializer", "initialized", "_disableInitializers"):
                confidence += 0.15
            out.append(("Upgrade Safety Risk", "upgrade_safety", confidence))

        if contains_any(content, "cross_chain", "bridge", "L1_to_L2"):
            confidence = 0.75
            if not contains_any(content, "verify_proof", "verify_message", "verify"):
                confidence += 0.1
            if "nonce" not in content:
                confidence += 0.05
            out.append(("Cross-Chain Risk", "cross_chain", confidence))

        if contains_any(content, "block.timestamp", "block.number", "block::timestamp", "block::number"):
            confidence = 0.75
            if "%" in content:
                confidence += 0.1
            if contains_any(content, "random", "seed"):
                confidence += 0.1
            out.append(("Timestamp Dependence", "timestamp_dependence", confidence))


def _has_public_surface(content: str, contract: Optional[ParsedContract]) -> bool:
    if contract is not None and contract.functions:
        return bool(contract.public_functions())
    return "pub fn" in content or bool(re.search(r'\b(?:public|external)\b', content))


def _has_parameterised_entry(content: str, contract: Optional[ParsedContract]) -> bool:
    if contract is not None and contract.functions:
        return any(f.value_params() for f in contract.public_functions())
    return bool(_RUST_PARAM_FN.search(content) or _SOL_PARAM_FN.search(content))
