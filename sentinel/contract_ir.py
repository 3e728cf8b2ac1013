"""
Contract IR: the dialect-independent structural summary of a contract.

Both supported grammars (Solidity and Stylus-flavoured Rust) are reduced to
the same shape: an ordered list of functions, an ordered list of structures
and the raw source text for rules that rely on textual heuristics.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class Dialect(Enum):
    SOLIDITY = "solidity"
    RUST = "rust"


class Visibility(Enum):
    PUBLIC = "public"
    EXTERNAL = "external"
    INTERNAL = "internal"
    PRIVATE = "private"

    @property
    def is_exposed(self) -> bool:
        """Whether the function can be invoked from outside the contract."""
        return self in (Visibility.PUBLIC, Visibility.EXTERNAL)


# ---------------------------------------------------------------------------
# Data structures
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class FunctionParam:
    name: str
    type_name: str

    def describe(self) -> str:
        if not self.name or self.name == "self":
            return self.type_name
        return f"{self.name}: {self.type_name}"


@dataclass(frozen=True)
class FunctionDef:
    name: str
    visibility: Visibility
    params: Tuple[FunctionParam, ...] = ()
    return_type: Optional[str] = None
    body: str = ""  # serialized body text, used only for pattern matching

    @property
    def is_public(self) -> bool:
        return self.visibility.is_exposed

    def value_params(self) -> Tuple[FunctionParam, ...]:
        """Parameters excluding the Rust ``self`` receiver."""
        return tuple(p for p in self.params if p.name != "self")

    def signature(self) -> str:
        params = ", ".join(p.describe() for p in self.params)
        sig = f"{self.name}({params})"
        if self.return_type:
            sig += f" -> {self.return_type}"
        return sig


@dataclass(frozen=True)
class StructField:
    name: str
    type_name: str


@dataclass(frozen=True)
class StructDef:
    name: str
    fields: Tuple[StructField, ...] = ()

    @property
    def field_count(self) -> int:
        return len(self.fields)


@dataclass(frozen=True)
class ParsedContract:
    """Complete IR for one analysed source file.

    Constructed once per analysis by the SourceIR builder and never mutated
    afterwards, so it may be shared across rules without synchronisation.
    """
    dialect: Dialect
    functions: Tuple[FunctionDef, ...] = ()
    structures: Tuple[StructDef, ...] = ()
    raw_source: str = field(default="", repr=False)
    label: Optional[str] = None

    @property
    def function_count(self) -> int:
        return len(self.functions)

    @property
    def struct_count(self) -> int:
        return len(self.structures)

    def public_functions(self) -> Tuple[FunctionDef, ...]:
        return tuple(f for f in self.functions if f.is_public)

    def function_names(self) -> Tuple[str, ...]:
        return tuple(f.name for f in self.functions)

    def get_function(self, name: str) -> Optional[FunctionDef]:
        return next((f for f in self.functions if f.name == name), None)

    def get_structure(self, name: str) -> Optional[StructDef]:
        return next((s for s in self.structures if s.name == name), None)
