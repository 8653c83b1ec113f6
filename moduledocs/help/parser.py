"""
Help content parser - command help to ``CommandHelpModel``.

Input is either a structured help snapshot (mapping / object graph, for
example ``Get-Help -Full | ConvertTo-Json``) or the raw text dump of the
same help. The structured path reads fields through the adapter chains
in ``adapters``; when it is absent or fails, the raw text path is used.
"""

import logging
from typing import Any, Optional

from moduledocs.help import adapters
from moduledocs.help.models import (
    CommandHelpModel,
    ExampleHelp,
    ExamplesMode,
    ParameterHelp,
    RelatedLink,
    SyntaxSet,
    TypeHelp,
)
from moduledocs.help.raw_text import example_title, extract_raw_examples, parse_raw_help
from moduledocs.help.segmenter import ExampleSegmenter

logger = logging.getLogger(__name__)


class HelpContentParser:
    """Parse structured or raw command help."""

    def __init__(self, segmenter: Optional[ExampleSegmenter] = None):
        self.segmenter = segmenter or ExampleSegmenter()

    def parse(
        self,
        source: Any,
        raw_dump: Optional[str] = None,
        examples_mode: ExamplesMode = ExamplesMode.AUTO,
        fallback_name: Optional[str] = None,
    ) -> Optional[CommandHelpModel]:
        """
        Parse command help.

        Never raises: malformed structured input falls back to the raw
        dump, and an unusable dump yields a name-only model or None.

        Args:
            source: Structured snapshot, raw text, or None
            raw_dump: Raw text of the same help (verbatim examples, fallback)
            examples_mode: Where example bodies come from
            fallback_name: Command name used when the input has none

        Returns:
            The model, or None when nothing usable was found
        """
        if isinstance(source, str):
            return self._parse_raw(source, fallback_name)

        if adapters.is_structured(source):
            try:
                model = self._parse_structured(source, raw_dump, examples_mode, fallback_name)
            except Exception as e:
                logger.warning(f"Structured help unusable, falling back to raw text: {e}")
            else:
                if model is not None:
                    return model
                logger.debug("Structured help carried no usable field")

        return self._parse_raw(raw_dump, fallback_name)

    def _parse_raw(self, text: Optional[str], fallback_name: Optional[str]) -> Optional[CommandHelpModel]:
        try:
            return parse_raw_help(text, self.segmenter, fallback_name)
        except Exception as e:
            logger.warning(f"Raw help text unusable: {e}")
            name = (fallback_name or "").strip()
            return CommandHelpModel(name=name) if name else None

    # ============================================================
    # Structured path
    # ============================================================

    def _parse_structured(
        self,
        source: Any,
        raw_dump: Optional[str],
        examples_mode: ExamplesMode,
        fallback_name: Optional[str],
    ) -> Optional[CommandHelpModel]:
        name = adapters.text_of(adapters.field(source, "name"), " ") or ""
        synopsis = adapters.text_of(adapters.field(source, "synopsis"), " ") or ""
        description = adapters.text_of(adapters.field(source, "description")) or ""

        syntax = tuple(
            SyntaxSet.build(
                adapters.text_of(adapters.field(entry, "name"), " ") or name or (fallback_name or ""),
                [p for p in (self._parameter(raw) for raw in adapters.items(entry, "syntax_parameters")) if p],
            )
            for entry in adapters.items(source, "syntax")
        )
        parameters = tuple(
            p for p in (self._parameter(raw) for raw in adapters.items(source, "parameters")) if p
        )

        notes_parts = (
            adapters.paragraphs(adapters.field(source, "alerts"))
            + adapters.paragraphs(adapters.field(source, "notes"))
        )

        if not (name or synopsis or description or syntax or parameters):
            return None

        return CommandHelpModel(
            name=name or (fallback_name or "").strip(),
            synopsis=synopsis,
            description=description,
            syntax=syntax,
            parameters=parameters,
            examples=tuple(self._examples(source, raw_dump, examples_mode)),
            inputs=tuple(self._types(source, "inputs")),
            outputs=tuple(self._types(source, "outputs")),
            notes="\n\n".join(notes_parts) or None,
            related_links=tuple(self._links(source)),
        )

    def _parameter(self, raw: Any) -> Optional[ParameterHelp]:
        name = adapters.text_of(adapters.field(raw, "name"), " ")
        if not name:
            return None
        return ParameterHelp(
            name=name.strip().lstrip("-"),
            type=adapters.type_name(raw, self_descriptor=False) or "",
            description=adapters.text_of(adapters.field(raw, "description")),
            position=adapters.text_of(adapters.field(raw, "position"), " "),
            required=adapters.as_bool(adapters.field(raw, "required")),
            pipeline_input=adapters.text_of(adapters.field(raw, "pipeline_input"), " "),
            supports_wildcards=adapters.as_bool(adapters.field(raw, "globbing")),
            default_value=adapters.text_of(adapters.field(raw, "default_value"), " "),
            aliases=adapters.aliases_of(raw),
        )

    def _examples(self, source: Any, raw_dump: Optional[str], mode: ExamplesMode) -> list[ExampleHelp]:
        if mode is not ExamplesMode.STRUCTURED:
            raw = extract_raw_examples(raw_dump, self.segmenter)
            if raw or mode is ExamplesMode.RAW:
                return raw

        examples: list[ExampleHelp] = []
        for number, entry in enumerate(adapters.items(source, "examples"), start=1):
            title = adapters.text_of(adapters.field(entry, "title"), " ") or ""
            code = adapters.text_of(adapters.field(entry, "code"), "\n") or ""
            intro = adapters.text_of(adapters.field(entry, "introduction"), " ") or ""
            if intro and code and not code.lstrip().startswith(intro):
                code = f"{intro} {code.lstrip()}"

            result = self.segmenter.classify(code)
            remarks = adapters.text_of(adapters.field(entry, "remarks"))
            examples.append(ExampleHelp(
                title=example_title(title, number) if title else f"Example {number}",
                code=result.code,
                remarks=adapters.join_text([result.remarks, remarks]),
                mode=f"structured:{result.mode}",
            ))
        return examples

    def _types(self, source: Any, logical: str) -> list[TypeHelp]:
        found: list[TypeHelp] = []
        for entry in adapters.items(source, logical):
            type_name = adapters.type_name(entry)
            if not type_name:
                continue
            found.append(TypeHelp(
                type_name=type_name,
                description=adapters.text_of(adapters.field(entry, "description"), " "),
            ))
        return found

    def _links(self, source: Any) -> list[RelatedLink]:
        links: list[RelatedLink] = []
        for entry in adapters.items(source, "related_links"):
            if isinstance(entry, str):
                title, uri = entry.strip(), None
            else:
                title = adapters.text_of(adapters.field(entry, "link_text"), " ") or ""
                uri = adapters.text_of(adapters.field(entry, "uri"), " ")
            if title or uri:
                links.append(RelatedLink(title=title or uri, uri=uri))
        return links
