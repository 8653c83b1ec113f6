"""
Command help data models.

A ``CommandHelpModel`` is the normalized reference page of one command,
built either from a structured help snapshot or from a raw text dump.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


class ExamplesMode(Enum):
    """Where example bodies are taken from."""
    AUTO = "auto"              # raw dump when it has examples, else structured
    RAW = "raw"                # raw dump only
    STRUCTURED = "structured"  # structured snapshot only

    @classmethod
    def parse(cls, value: str) -> "ExamplesMode":
        """Parse a mode name case-insensitively (``maml`` means structured)."""
        wanted = value.strip().lower()
        if wanted == "maml":
            return cls.STRUCTURED
        for mode in cls:
            if mode.value == wanted:
                return mode
        raise ValueError(f"Unknown examples mode: {value}")


# ============================================================
# Data models
# ============================================================

@dataclass(frozen=True)
class ParameterHelp:
    """
    One command parameter.

    Attributes:
        name: Parameter name without the leading dash
        type: Type name (empty when unknown)
        description: Description text
        position: Position (``named``, ``0``...)
        required: True / False, None when not stated
        pipeline_input: Pipeline input description
        supports_wildcards: True / False, None when not stated
        default_value: Default value text
        aliases: Alternative names
    """
    name: str
    type: str = ""
    description: Optional[str] = None
    position: Optional[str] = None
    required: Optional[bool] = None
    pipeline_input: Optional[str] = None
    supports_wildcards: Optional[bool] = None
    default_value: Optional[str] = None
    aliases: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "type": self.type,
            "description": self.description,
            "position": self.position,
            "required": self.required,
            "pipeline_input": self.pipeline_input,
            "supports_wildcards": self.supports_wildcards,
            "default_value": self.default_value,
            "aliases": list(self.aliases),
        }


@dataclass(frozen=True)
class SyntaxSet:
    """One syntax variant (parameter set) of a command."""
    name: str
    parameters: tuple[ParameterHelp, ...] = ()

    @classmethod
    def build(cls, name: str, parameters: list[ParameterHelp]) -> "SyntaxSet":
        """Create a set, keeping the first parameter of each name (case-insensitive)."""
        seen: set[str] = set()
        unique: list[ParameterHelp] = []
        for param in parameters:
            key = param.name.lower()
            if not key or key in seen:
                continue
            seen.add(key)
            unique.append(param)
        return cls(name=name, parameters=tuple(unique))

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "parameters": [p.to_dict() for p in self.parameters],
        }


@dataclass(frozen=True)
class ExampleHelp:
    """
    One usage example.

    Attributes:
        title: Example title
        code: Executable part
        remarks: Narrative part
        mode: Which rule produced the split (diagnostics only)
    """
    title: str
    code: str = ""
    remarks: str = ""
    mode: str = ""

    @property
    def code_line_count(self) -> int:
        return len(self.code.split("\n")) if self.code else 0

    @property
    def remarks_line_count(self) -> int:
        return len(self.remarks.split("\n")) if self.remarks else 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "code": self.code,
            "remarks": self.remarks,
            "mode": self.mode,
        }


@dataclass(frozen=True)
class TypeHelp:
    """An input or output type."""
    type_name: str
    description: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {"type_name": self.type_name, "description": self.description}


@dataclass(frozen=True)
class RelatedLink:
    """A related link; ``uri`` is None for plain text references."""
    title: str
    uri: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {"title": self.title, "uri": self.uri}


@dataclass(frozen=True)
class CommandHelpModel:
    """
    Normalized help of one command.

    Attributes:
        name: Command name
        synopsis: One-line summary
        description: Long description (paragraphs separated by blank lines)
        syntax: Syntax variants
        parameters: Detailed parameters in declaration order
        examples: Usage examples
        inputs: Accepted input types
        outputs: Returned types
        notes: Free-form notes
        related_links: Related links
    """
    name: str
    synopsis: str = ""
    description: str = ""
    syntax: tuple[SyntaxSet, ...] = ()
    parameters: tuple[ParameterHelp, ...] = ()
    examples: tuple[ExampleHelp, ...] = ()
    inputs: tuple[TypeHelp, ...] = ()
    outputs: tuple[TypeHelp, ...] = ()
    notes: Optional[str] = None
    related_links: tuple[RelatedLink, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "name": self.name,
            "synopsis": self.synopsis,
            "description": self.description,
            "syntax": [s.to_dict() for s in self.syntax],
            "parameters": [p.to_dict() for p in self.parameters],
            "examples": [e.to_dict() for e in self.examples],
            "inputs": [t.to_dict() for t in self.inputs],
            "outputs": [t.to_dict() for t in self.outputs],
            "notes": self.notes,
            "related_links": [link.to_dict() for link in self.related_links],
        }
