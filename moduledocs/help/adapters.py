"""
Structured help adapters.

Help snapshots arrive as nested mappings (deserialized JSON) or as plain
objects, and the same field shows up under different names and shapes
depending on the producer version. Every extractor here is an ordered
chain of small adapters; each returns a value, or None to let the next
one try.

Shapes handled:
1. Field names: primary name, then known alternates, case-insensitive
2. Text payloads: plain string, ``Text``, ``para``, ``#text``, sequences,
   any nested usable value
3. Collections: ``{container: {item: [...]}}``, ``{container: [...]}`` or a
   single item
"""

from typing import Any, Callable, Iterable, Mapping, Optional, Sequence


# ============================================================
# Field names
# ============================================================

# Logical field -> names tried in order (dots walk nested objects)
FIELD_NAMES: dict[str, tuple[str, ...]] = {
    "name": ("Name", "CommandName", "Details.Name"),
    "synopsis": ("Synopsis", "Summary", "Details.Description"),
    "description": ("Description", "LongDescription"),
    "title": ("Title",),
    "introduction": ("Introduction",),
    "code": ("Code", "Script"),
    "remarks": ("Remarks",),
    "type": ("Type", "ParameterType", "ParameterValue"),
    "required": ("Required", "IsMandatory", "Mandatory"),
    "position": ("Position",),
    "pipeline_input": ("PipelineInput", "AcceptPipelineInput"),
    "globbing": ("Globbing", "SupportsWildcards", "AcceptWildcardCharacters"),
    "default_value": ("DefaultValue",),
    "aliases": ("Aliases", "Alias"),
    "link_text": ("LinkText", "Title", "Text"),
    "uri": ("Uri", "Url", "Href"),
    "alerts": ("AlertSet",),
    "notes": ("Notes",),
}

# Logical collection -> (container, item) pairs tried in order
COLLECTIONS: dict[str, tuple[tuple[str, Optional[str]], ...]] = {
    "syntax": (("Syntax", "SyntaxItem"),),
    "syntax_parameters": (("Parameter", None), ("Parameters", "Parameter")),
    "parameters": (("Parameters", "Parameter"),),
    "examples": (("Examples", "Example"),),
    "inputs": (("InputTypes", "InputType"), ("Inputs", "Input")),
    "outputs": (("ReturnValues", "ReturnValue"), ("Outputs", "Output")),
    "related_links": (("RelatedLinks", "NavigationLink"), ("Links", "Link")),
}

_SCALARS = (str, bytes, int, float, bool)


# ============================================================
# Field probing
# ============================================================

def is_structured(value: Any) -> bool:
    """Whether a value can be probed for named fields."""
    if value is None or isinstance(value, _SCALARS):
        return False
    if isinstance(value, Mapping):
        return True
    return hasattr(value, "__dict__")


def probe(source: Any, name: str) -> Any:
    """
    Read one field, case-insensitively.

    Mappings are probed by key, other objects by attribute. A dotted name
    walks nested objects.

    Returns:
        The field value, or None when absent
    """
    if "." in name:
        current = source
        for part in name.split("."):
            current = probe(current, part)
            if current is None:
                return None
        return current

    if not is_structured(source):
        return None

    if isinstance(source, Mapping):
        if name in source:
            return source[name]
        lowered = name.lower()
        for key, value in source.items():
            if isinstance(key, str) and key.lower() == lowered:
                return value
        return None

    value = getattr(source, name, None)
    if value is not None:
        return value
    lowered = name.lower()
    for attr in _attribute_names(source):
        if attr.lower() == lowered:
            return getattr(source, attr, None)
    return None


def field(source: Any, logical: str) -> Any:
    """First present value among the names of a logical field."""
    for name in FIELD_NAMES.get(logical, (logical,)):
        value = probe(source, name)
        if value is not None:
            return value
    return None


def _attribute_names(source: Any) -> list[str]:
    names = getattr(source, "__dict__", None)
    if isinstance(names, Mapping):
        return [str(n) for n in names]
    return [n for n in dir(source) if not n.startswith("_")]


def _fields(value: Any) -> list[Any]:
    """Values of every field of a structured value, in declaration order."""
    if isinstance(value, Mapping):
        return list(value.values())
    return [getattr(value, name, None) for name in _attribute_names(value)]


# ============================================================
# Text payload adapters
# ============================================================

TextAdapter = Callable[[Any], Optional[list[str]]]


def text_from_string(value: Any) -> Optional[list[str]]:
    """A plain string."""
    if isinstance(value, str):
        return [value]
    return None


def _text_from_field(name: str) -> TextAdapter:
    def adapter(value: Any) -> Optional[list[str]]:
        if not is_structured(value):
            return None
        inner = probe(value, name)
        if inner is None:
            return None
        return paragraphs(inner)
    adapter.__name__ = f"text_from_{name.strip('#').lower()}_field"
    return adapter


text_from_text_field = _text_from_field("Text")
text_from_para_field = _text_from_field("para")
text_from_hash_text_field = _text_from_field("#text")


def text_from_sequence(value: Any) -> Optional[list[str]]:
    """A list or tuple of payloads."""
    if not isinstance(value, (list, tuple)):
        return None
    found: list[str] = []
    for item in value:
        found.extend(paragraphs(item))
    return found


def text_from_any_payload(value: Any) -> Optional[list[str]]:
    """Any usable nested value of a structured object, or a scalar."""
    if value is None:
        return None
    if isinstance(value, bool):
        return [str(value).lower()]
    if isinstance(value, (int, float)):
        return [str(value)]
    if not is_structured(value):
        return None
    found: list[str] = []
    for inner in _fields(value):
        if inner is None or callable(inner):
            continue
        found.extend(paragraphs(inner))
    return found


TEXT_ADAPTERS: tuple[TextAdapter, ...] = (
    text_from_string,
    text_from_text_field,
    text_from_para_field,
    text_from_hash_text_field,
    text_from_sequence,
    text_from_any_payload,
)


def first_result(adapters: Iterable[Callable[[Any], Any]], value: Any) -> Any:
    """Run adapters in order and return the first non-None result."""
    for adapter in adapters:
        result = adapter(value)
        if result is not None:
            return result
    return None


def paragraphs(value: Any) -> list[str]:
    """Trimmed, non-empty text paragraphs of a payload."""
    found = first_result(TEXT_ADAPTERS, value) or []
    return [p.strip() for p in found if p and p.strip()]


def text_of(value: Any, separator: str = "\n\n") -> Optional[str]:
    """Text of a payload with paragraphs joined, or None when empty."""
    parts = paragraphs(value)
    if not parts:
        return None
    return separator.join(parts)


# ============================================================
# Collections
# ============================================================

def flatten(value: Any) -> list[Any]:
    """A list for list values, a one-item list for anything else."""
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return [item for item in value if item is not None]
    return [value]


def items(source: Any, logical: str) -> list[Any]:
    """
    Members of a logical collection.

    Args:
        source: Structured object
        logical: Key of ``COLLECTIONS``

    Returns:
        Collection members (empty when absent)
    """
    for container_name, item_name in COLLECTIONS.get(logical, ((logical, None),)):
        container = probe(source, container_name)
        if container is None:
            continue
        if item_name and is_structured(container) and not isinstance(container, (list, tuple)):
            inner = probe(container, item_name)
            if inner is not None:
                return flatten(inner)
        return flatten(container)
    return []


# ============================================================
# Typed values
# ============================================================

def as_bool(value: Any) -> Optional[bool]:
    """True / False from booleans and ``true``/``false`` text, else None."""
    if isinstance(value, bool):
        return value
    text = text_of(value, " ")
    if text is None:
        return None
    lowered = text.strip().lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    return None


def type_name(value: Any, self_descriptor: bool = True) -> Optional[str]:
    """
    Type name of a parameter or input/output entry.

    Tries the ``Type`` field (string, or ``Name`` / ``Text`` / ``#text``
    inside it), then, with ``self_descriptor``, the entry itself as a type
    descriptor.
    """
    candidates = [field(value, "type")]
    if self_descriptor:
        candidates.append(value)
    for candidate in candidates:
        if candidate is None:
            continue
        if isinstance(candidate, str):
            if candidate.strip():
                return candidate.strip()
            continue
        for name in ("Name", "Text", "#text"):
            inner = probe(candidate, name)
            text = text_of(inner, " ") if inner is not None else None
            if text:
                return text
    return None


def aliases_of(value: Any) -> tuple[str, ...]:
    """Alias names; ``none`` and blanks are dropped, comma lists are split."""
    names: list[str] = []
    for entry in flatten(field(value, "aliases")):
        text = entry if isinstance(entry, str) else text_of(entry, ",")
        if not text:
            continue
        for part in text.split(","):
            part = part.strip()
            if part and part.lower() != "none" and part not in names:
                names.append(part)
    return tuple(names)


def join_text(parts: Sequence[Optional[str]], separator: str = "\n") -> str:
    """Join the non-empty parts."""
    return separator.join(p for p in parts if p)
