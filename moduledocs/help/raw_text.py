"""
Raw help text parsing.

Reads the text rendering of a command's help (``Get-Help -Full`` piped to
``Out-String``) section by section:

    NAME / SYNOPSIS / SYNTAX / DESCRIPTION / PARAMETERS / EXAMPLES /
    INPUTS / OUTPUTS / NOTES / RELATED LINKS

A header is a line equal to one of the names above once trimmed,
ignoring case. A section runs until the next header line of any kind.
"""

import re
import textwrap
from typing import Optional

from moduledocs.help.models import (
    CommandHelpModel,
    ExampleHelp,
    ParameterHelp,
    RelatedLink,
    SyntaxSet,
    TypeHelp,
)
from moduledocs.help.segmenter import ExampleSegmenter


# ============================================================
# Constants
# ============================================================

SECTION_HEADERS: tuple[str, ...] = (
    "NAME",
    "SYNOPSIS",
    "SYNTAX",
    "DESCRIPTION",
    "PARAMETERS",
    "EXAMPLES",
    "INPUTS",
    "OUTPUTS",
    "NOTES",
    "RELATED LINKS",
)

# Trailing blocks of Get-Help output; they only end the previous section
TERMINATOR_HEADERS: tuple[str, ...] = ("ALIASES", "REMARKS")

EXAMPLE_MARKER = re.compile(r'^EXAMPLE(?=\s|:|\d|$)', re.IGNORECASE)

EXAMPLE_TITLE_PREFIX = re.compile(r'^EXAMPLE\s*(\d*)\s*:?\s*', re.IGNORECASE)

SYNTAX_PARAMETER = re.compile(
    r'(?:^|(?<=\s))(?P<open>\[{0,2})-(?P<name>[A-Za-z][\w]*)(?P<close>\]?)'
    r'(?:\s+(?P<type>\[<[^>]*>\]|<[^>]*>))?'
)

PARAMETER_HEADER = re.compile(r'^-(?P<name>[A-Za-z][\w]*)(?:\s+(?P<type>\[<[^>]*>\]|<[^>]*>))?\s*$')

PARAMETER_PROPERTIES: dict[str, str] = {
    "required?": "required",
    "position?": "position",
    "default value": "default_value",
    "accept pipeline input?": "pipeline_input",
    "accept wildcard characters?": "supports_wildcards",
    "aliases": "aliases",
    "parameter set name": "",
    "dynamic?": "",
}

PROPERTY_LINE = re.compile(
    r'^(?P<key>' + "|".join(re.escape(k) for k in PARAMETER_PROPERTIES) + r')(?:\s+(?P<value>.*))?$',
    re.IGNORECASE,
)

COMMON_PARAMETERS = "<commonparameters>"

URL_PATTERN = re.compile(r'(?:https?|ftp)://\S+', re.IGNORECASE)

COMMAND_NAME = re.compile(r'^[A-Za-z][\w.]*(?:-[\w.]+)*$')


# ============================================================
# Section scanning
# ============================================================

def split_lines(text: str) -> list[str]:
    return text.replace("\r\n", "\n").replace("\r", "\n").split("\n")


def find_sections(lines: list[str]) -> dict[str, list[str]]:
    """
    Locate recognized sections.

    Only the first occurrence of each header is used; its body ends at the
    nearest following header line of any kind.

    Returns:
        Header -> body lines, in order of appearance
    """
    known = set(SECTION_HEADERS) | set(TERMINATOR_HEADERS)
    boundaries: list[tuple[int, str]] = []
    for index, line in enumerate(lines):
        header = line.strip().upper()
        if header in known:
            boundaries.append((index, header))

    sections: dict[str, list[str]] = {}
    for position, (index, header) in enumerate(boundaries):
        if header not in SECTION_HEADERS or header in sections:
            continue
        end = boundaries[position + 1][0] if position + 1 < len(boundaries) else len(lines)
        sections[header] = lines[index + 1:end]
    return sections


def _indent(line: str) -> int:
    return len(line) - len(line.lstrip())


def _base_indent(lines: list[str]) -> int:
    indents = [_indent(line) for line in lines if line.strip()]
    return min(indents) if indents else 0


def _paragraphs(lines: list[str]) -> list[str]:
    """Blank-line separated paragraphs, each collapsed to one line."""
    found: list[str] = []
    current: list[str] = []
    for line in lines:
        if line.strip():
            current.append(line.strip())
        elif current:
            found.append(" ".join(current))
            current = []
    if current:
        found.append(" ".join(current))
    return found


def _dedent(lines: list[str]) -> str:
    return textwrap.dedent("\n".join(lines)).strip("\n").rstrip()


# ============================================================
# Sections
# ============================================================

def parse_synopsis(lines: list[str]) -> str:
    """Non-blank lines, trimmed and joined with spaces."""
    return " ".join(line.strip() for line in lines if line.strip())


def parse_description(lines: list[str]) -> str:
    return "\n\n".join(_paragraphs(lines))


def _type_text(token: Optional[str]) -> str:
    if not token:
        return ""
    return token.strip("[]").strip("<>").strip()


def parse_syntax_line(text: str) -> list[ParameterHelp]:
    """
    Parameters of one syntax line.

    ``-Name <T>`` is required, ``[-Name <T>]`` optional, ``[-Name] <T>``
    required and positional, ``[[-Name] <T>]`` optional and positional.
    """
    params: list[ParameterHelp] = []
    positional = 0
    for match in SYNTAX_PARAMETER.finditer(text):
        opens = len(match.group("open"))
        closed = bool(match.group("close"))
        param_type = _type_text(match.group("type"))

        if opens == 0:
            required, is_positional = True, False
        elif opens == 1 and closed and param_type:
            required, is_positional = True, True
        elif opens >= 2:
            required, is_positional = False, True
        else:
            required, is_positional = False, False

        position = "named"
        if is_positional:
            position = str(positional)
            positional += 1

        params.append(ParameterHelp(
            name=match.group("name"),
            type=param_type,
            required=required,
            position=position,
        ))
    return params


def parse_syntax(lines: list[str]) -> list[SyntaxSet]:
    """
    One syntax set per command line.

    Lines indented deeper than the section, or starting with a parameter
    token, continue the previous set.
    """
    base = _base_indent(lines)
    chunks: list[tuple[str, list[str]]] = []
    for line in lines:
        stripped = line.strip()
        if not stripped:
            continue
        starts_set = _indent(line) <= base and not stripped.startswith(("-", "[", "<"))
        if starts_set or not chunks:
            name = stripped.split()[0]
            chunks.append((name, [stripped[len(name):]]))
        else:
            chunks[-1][1].append(stripped)

    sets: list[SyntaxSet] = []
    for name, parts in chunks:
        text = " ".join(parts)
        text = re.sub(r'\[?<CommonParameters>\]?', " ", text, flags=re.IGNORECASE)
        sets.append(SyntaxSet.build(name, parse_syntax_line(text)))
    return sets


def _parse_flag(value: Optional[str]) -> Optional[bool]:
    lowered = (value or "").strip().lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    return None


def _optional(value: Optional[str]) -> Optional[str]:
    value = (value or "").strip()
    return value or None


def parse_parameters(lines: list[str]) -> list[ParameterHelp]:
    """
    Detailed parameters in declaration order.

    Each parameter starts at a ``-Name <Type>`` line; the lines below it are
    description paragraphs and property lines (``Required?``...). The
    ``<CommonParameters>`` block is skipped.
    """
    base = _base_indent(lines)
    blocks: list[tuple[Optional[re.Match], list[str]]] = []
    for line in lines:
        stripped = line.strip()
        if _indent(line) <= base and stripped:
            header = PARAMETER_HEADER.match(stripped)
            if header:
                blocks.append((header, []))
                continue
            if stripped.lower() == COMMON_PARAMETERS:
                blocks.append((None, []))
                continue
        if blocks:
            blocks[-1][1].append(line)

    params: list[ParameterHelp] = []
    for header, body in blocks:
        if header is None:
            continue
        props: dict[str, str] = {}
        description: list[str] = []
        for line in body:
            prop = PROPERTY_LINE.match(line.strip())
            if prop:
                key = PARAMETER_PROPERTIES[prop.group("key").lower()]
                if key:
                    props[key] = (prop.group("value") or "").strip()
            else:
                description.append(line)

        aliases = tuple(
            a.strip() for a in props.get("aliases", "").split(",")
            if a.strip() and a.strip().lower() != "none"
        )
        text = "\n\n".join(_paragraphs(description))
        params.append(ParameterHelp(
            name=header.group("name"),
            type=_type_text(header.group("type")),
            description=text or None,
            position=_optional(props.get("position")),
            required=_parse_flag(props.get("required")),
            pipeline_input=_optional(props.get("pipeline_input")),
            supports_wildcards=_parse_flag(props.get("supports_wildcards")),
            default_value=_optional(props.get("default_value")),
            aliases=aliases,
        ))
    return params


def parse_types(lines: list[str]) -> list[TypeHelp]:
    """Least-indented lines are type names, deeper lines describe them."""
    base = _base_indent(lines)
    entries: list[tuple[str, list[str]]] = []
    for line in lines:
        stripped = line.strip()
        if not stripped:
            continue
        if _indent(line) <= base:
            entries.append((stripped, []))
        elif entries:
            entries[-1][1].append(stripped)
    return [
        TypeHelp(type_name=name, description=" ".join(desc) or None)
        for name, desc in entries
    ]


def parse_notes(lines: list[str]) -> Optional[str]:
    text = _dedent(lines)
    return text or None


def parse_related_links(lines: list[str]) -> list[RelatedLink]:
    """One link per line; lines holding a URL get it as ``uri``."""
    links: list[RelatedLink] = []
    for line in lines:
        stripped = line.strip()
        if not stripped:
            continue
        url = URL_PATTERN.search(stripped)
        if url:
            title = stripped[:url.start()].strip().rstrip(":").strip()
            links.append(RelatedLink(title=title or url.group(0), uri=url.group(0)))
        else:
            links.append(RelatedLink(title=stripped))
    return links


# ============================================================
# Examples
# ============================================================

def _strip_decoration(line: str) -> str:
    return line.strip().strip("-").strip()


def is_example_header(line: str) -> bool:
    """Whether a line starts a new example (``---- EXAMPLE 1 ----``, ``Example 2:``...)."""
    return bool(EXAMPLE_MARKER.match(_strip_decoration(line)))


def example_title(line: str, number: int) -> str:
    """
    Title of an example header line with the marker removed.

    ``EXAMPLE 3: Get things`` gives ``Get things``; a bare marker gives
    ``Example <n>``, numbered by the marker when it has a number.
    """
    text = _strip_decoration(line)
    match = EXAMPLE_TITLE_PREFIX.match(text)
    if match is None:
        return text or f"Example {number}"
    remainder = text[match.end():].strip().strip("-").strip()
    if remainder:
        return remainder
    return f"Example {match.group(1) or number}"


def parse_examples(lines: list[str], segmenter: ExampleSegmenter) -> list[ExampleHelp]:
    """
    Split the EXAMPLES section and segment each body.

    Text before the first marker is ignored; without any marker the whole
    section is one example.
    """
    if not any(line.strip() for line in lines):
        return []

    chunks: list[tuple[str, list[str]]] = []
    for line in lines:
        if is_example_header(line):
            chunks.append((example_title(line, len(chunks) + 1), []))
        elif chunks:
            chunks[-1][1].append(line)

    if not chunks:
        chunks = [("Example 1", list(lines))]

    examples: list[ExampleHelp] = []
    for title, body in chunks:
        result = segmenter.classify(_dedent(body), allow_trailing_narrative=True)
        examples.append(ExampleHelp(
            title=title,
            code=result.code,
            remarks=result.remarks,
            mode=f"raw:{result.mode}",
        ))
    return examples


def extract_raw_examples(text: Optional[str], segmenter: ExampleSegmenter) -> list[ExampleHelp]:
    """Examples of a raw dump; empty when the dump has no EXAMPLES section."""
    if not text or not text.strip():
        return []
    sections = find_sections(split_lines(text))
    return parse_examples(sections.get("EXAMPLES", []), segmenter)


# ============================================================
# Whole dump
# ============================================================

def _fallback_name(lines: list[str], fallback_name: Optional[str]) -> Optional[str]:
    if fallback_name and fallback_name.strip():
        return fallback_name.strip()
    for line in lines:
        if line.strip():
            first = line.strip()
            return first if COMMAND_NAME.match(first) else None
    return None


def parse_raw_help(
    text: Optional[str],
    segmenter: ExampleSegmenter,
    fallback_name: Optional[str] = None,
) -> Optional[CommandHelpModel]:
    """
    Parse a raw help dump.

    Args:
        text: Raw dump
        segmenter: Example segmenter
        fallback_name: Name used when the dump has no NAME section

    Returns:
        The model; a name-only model when no section is recognized; None
        when not even a name is available
    """
    lines = split_lines(text or "")
    sections = find_sections(lines)

    if not sections:
        name = _fallback_name(lines, fallback_name)
        return CommandHelpModel(name=name) if name else None

    name = parse_synopsis(sections.get("NAME", [])) or (fallback_name or "").strip()
    return CommandHelpModel(
        name=name,
        synopsis=parse_synopsis(sections.get("SYNOPSIS", [])),
        description=parse_description(sections.get("DESCRIPTION", [])),
        syntax=tuple(parse_syntax(sections.get("SYNTAX", []))),
        parameters=tuple(parse_parameters(sections.get("PARAMETERS", []))),
        examples=tuple(parse_examples(sections.get("EXAMPLES", []), segmenter)),
        inputs=tuple(parse_types(sections.get("INPUTS", []))),
        outputs=tuple(parse_types(sections.get("OUTPUTS", []))),
        notes=parse_notes(sections.get("NOTES", [])),
        related_links=tuple(parse_related_links(sections.get("RELATED LINKS", []))),
    )
