"""Tests for raw and structured command help parsing."""

from types import SimpleNamespace

import pytest

from moduledocs.help.models import ExamplesMode
from moduledocs.help.parser import HelpContentParser
from moduledocs.help.raw_text import example_title, parse_syntax_line


RAW_HELP = """
NAME
    Get-Thing

SYNOPSIS
    Gets things
    from the store.


SYNTAX
    Get-Thing [-Name] <String[]> [-Force] [<CommonParameters>]

    Get-Thing -Id <Int32> [[-Filter] <String>] [<CommonParameters>]


DESCRIPTION
    The Get-Thing cmdlet gets things.

    It never changes them.


PARAMETERS
    -Name <String[]>
        Names of the things.

        Required?                    true
        Position?                    0
        Default value                None
        Accept pipeline input?       True (ByValue)
        Accept wildcard characters?  false

    -Force [<SwitchParameter>]
        Include hidden things.

        Required?                    false
        Position?                    named
        Default value                False
        Accept pipeline input?       False
        Accept wildcard characters?  false

    <CommonParameters>
        This cmdlet supports the common parameters.

INPUTS
    System.String
        You can pipe names.


OUTPUTS
    Thing


NOTES
    Requires the store module.

        Indented detail.
"""

RAW_EXAMPLES = """
EXAMPLES
    -------------------------- EXAMPLE 1 --------------------------

    PS C:\\>Get-Thing -Name a

    Gets the thing named a.

    -------------------------- EXAMPLE 2 --------------------------

    $things = Get-Thing
    $things | Format-List

    Shows every thing as a list.

RELATED LINKS
    Online Version: https://example.org/get-thing
    Set-Thing

REMARKS
    To see the examples, type: "get-help Get-Thing -examples".
"""


STRUCTURED_HELP = {
    "Details": {"Name": "Get-Thing", "Description": [{"Text": "Gets things."}]},
    "Description": [{"Text": "First paragraph."}, {"Text": "Second paragraph."}],
    "Syntax": {
        "SyntaxItem": [
            {
                "Name": "Get-Thing",
                "Parameter": [
                    {"Name": "Name", "Required": "true", "Position": "0", "ParameterValue": "string"},
                    {"Name": "name", "Required": "false"},
                ],
            }
        ]
    },
    "Parameters": {
        "Parameter": {
            "Name": "Name",
            "Type": {"Name": "System.String"},
            "Required": "true",
            "Position": "0",
            "Description": [{"Text": "The name."}],
            "Globbing": "false",
            "PipelineInput": "True (ByValue)",
            "Aliases": "n, none",
        }
    },
    "Examples": {
        "Example": [
            {
                "Title": "---------- EXAMPLE 1 ----------",
                "Introduction": [{"Text": "PS C:\\>"}],
                "Code": "Get-Thing -Name a",
                "Remarks": [{"Text": "Gets a."}, {"Text": ""}],
            }
        ]
    },
    "InputTypes": {"InputType": {"Type": {"Name": "System.String"}, "Description": [{"Text": "A name."}]}},
    "ReturnValues": {"ReturnValue": [{"Type": {"Name": "Thing"}}]},
    "AlertSet": {"Alert": [{"Text": "Be careful."}]},
    "RelatedLinks": {
        "NavigationLink": [
            {"LinkText": "Online", "Uri": "https://example.org/get-thing"},
            {"LinkText": "Set-Thing", "Uri": ""},
        ]
    },
}


@pytest.fixture
def parser() -> HelpContentParser:
    return HelpContentParser()


class TestRawSections:
    """Test section scanning of raw dumps."""

    def test_minimal_dump(self, parser):
        """Test synopsis, syntax and example of a short dump."""
        text = "SYNOPSIS\nDoes X.\nSYNTAX\nFoo-Bar [-X]\nEXAMPLES\nEXAMPLE 1\nFoo-Bar -X 1"
        model = parser.parse(text)

        assert model.synopsis == "Does X."
        assert len(model.syntax) == 1
        assert [p.name for p in model.syntax[0].parameters] == ["X"]
        assert len(model.examples) == 1
        assert model.examples[0].title == "Example 1"
        assert model.examples[0].code == "Foo-Bar -X 1"

    def test_full_dump(self, parser):
        """Test every section of a complete dump."""
        model = parser.parse(RAW_HELP)

        assert model.name == "Get-Thing"
        assert model.synopsis == "Gets things from the store."
        assert model.description == "The Get-Thing cmdlet gets things.\n\nIt never changes them."
        assert [(t.type_name, t.description) for t in model.inputs] == [("System.String", "You can pipe names.")]
        assert [(t.type_name, t.description) for t in model.outputs] == [("Thing", None)]
        assert model.notes == "Requires the store module.\n\n    Indented detail."

    def test_headers_are_case_insensitive(self, parser):
        """Test that header matching ignores case and surrounding blanks."""
        model = parser.parse("  synopsis  \nLower case header.\n")
        assert model.synopsis == "Lower case header."

    def test_first_occurrence_wins(self, parser):
        """Test that a repeated header is ignored."""
        model = parser.parse("SYNOPSIS\nfirst\nSYNOPSIS\nsecond\n")
        assert model.synopsis == "first"

    def test_terminator_headers_end_sections(self, parser):
        """Test that REMARKS ends RELATED LINKS."""
        model = parser.parse(RAW_EXAMPLES, fallback_name="Get-Thing")
        assert [(l.title, l.uri) for l in model.related_links] == [
            ("Online Version", "https://example.org/get-thing"),
            ("Set-Thing", None),
        ]


class TestRawSyntax:
    """Test syntax line decoding."""

    def test_syntax_sets(self, parser):
        """Test one set per command line with required / positional flags."""
        model = parser.parse(RAW_HELP)
        assert [s.name for s in model.syntax] == ["Get-Thing", "Get-Thing"]

        first = {p.name: p for p in model.syntax[0].parameters}
        assert list(first) == ["Name", "Force"]
        assert (first["Name"].required, first["Name"].position, first["Name"].type) == (True, "0", "String[]")
        assert (first["Force"].required, first["Force"].position) == (False, "named")

        second = {p.name: p for p in model.syntax[1].parameters}
        assert (second["Id"].required, second["Id"].position, second["Id"].type) == (True, "named", "Int32")
        assert (second["Filter"].required, second["Filter"].position) == (False, "0")

    @pytest.mark.parametrize(
        "text, required, position",
        [
            ("-Path <String>", True, "named"),
            ("[-Path <String>]", False, "named"),
            ("[-Path] <String>", True, "0"),
            ("[[-Path] <String>]", False, "0"),
        ],
    )
    def test_parameter_forms(self, text, required, position):
        """Test the four bracket forms."""
        (param,) = parse_syntax_line(" " + text)
        assert (param.name, param.required, param.position) == ("Path", required, position)

    def test_duplicate_parameters_collapse(self):
        """Test that a set keeps the first parameter of each name."""
        model = HelpContentParser().parse("SYNTAX\nGet-Thing [-Name] <String> [-name <Object>]\n")
        assert [p.type for p in model.syntax[0].parameters] == ["String"]


class TestRawParameters:
    """Test detailed parameter blocks."""

    def test_parameter_properties(self, parser):
        """Test property lines and description paragraphs."""
        model = parser.parse(RAW_HELP)
        assert [p.name for p in model.parameters] == ["Name", "Force"]

        name, force = model.parameters
        assert name.type == "String[]"
        assert name.description == "Names of the things."
        assert name.required is True
        assert name.position == "0"
        assert name.pipeline_input == "True (ByValue)"
        assert name.supports_wildcards is False

        assert force.type == "SwitchParameter"
        assert force.required is False
        assert force.default_value == "False"

    def test_common_parameters_skipped(self, parser):
        """Test that the CommonParameters block is not a parameter."""
        model = parser.parse(RAW_HELP)
        assert all("common" not in (p.description or "").lower() for p in model.parameters)


class TestRawExamples:
    """Test example splitting of raw dumps."""

    def test_examples_are_segmented(self, parser):
        """Test prompt and trailing narrative examples."""
        model = parser.parse(RAW_EXAMPLES, fallback_name="Get-Thing")
        first, second = model.examples

        assert first.title == "Example 1"
        assert first.code == "PS C:\\>Get-Thing -Name a"
        assert first.remarks == "Gets the thing named a."
        assert first.mode == "raw:prompt"

        assert second.title == "Example 2"
        assert second.code == "$things = Get-Thing\n$things | Format-List"
        assert second.remarks == "Shows every thing as a list."
        assert second.mode == "raw:trailing-narrative"

    def test_section_without_markers_is_one_example(self, parser):
        """Test that an unmarked section becomes Example 1."""
        model = parser.parse("EXAMPLES\n    Get-Thing\n", fallback_name="Get-Thing")
        assert [(e.title, e.code) for e in model.examples] == [("Example 1", "Get-Thing")]

    @pytest.mark.parametrize(
        "line, expected",
        [
            ("---------- EXAMPLE 3 ----------", "Example 3"),
            ("Example 2: Get every thing", "Get every thing"),
            ("EXAMPLE", "Example 5"),
        ],
    )
    def test_example_titles(self, line, expected):
        """Test titles with the marker removed."""
        assert example_title(line, 5) == expected


class TestRawFallbacks:
    """Test dumps without recognizable sections."""

    def test_fallback_name(self, parser):
        """Test that the fallback name fills a missing NAME section."""
        model = parser.parse("SYNOPSIS\nDoes X.\n", fallback_name="Foo-Bar")
        assert model.name == "Foo-Bar"

    def test_name_only_model(self, parser):
        """Test that a bare command name yields a name-only model."""
        model = parser.parse("Get-Thing\n")
        assert model.name == "Get-Thing"
        assert model.synopsis == ""
        assert model.examples == ()

    def test_unusable_text(self, parser):
        """Test that text without sections or a name yields None."""
        assert parser.parse("this is not help at all") is None
        assert parser.parse(None) is None
        assert parser.parse("") is None

    def test_unusable_text_with_fallback_name(self, parser):
        """Test that the fallback name still produces a model."""
        model = parser.parse("this is not help at all", fallback_name="Get-Thing")
        assert model.name == "Get-Thing"


class TestStructuredHelp:
    """Test structured help snapshots."""

    def test_fields(self, parser):
        """Test names, text payloads and collections."""
        model = parser.parse(STRUCTURED_HELP)

        assert model.name == "Get-Thing"
        assert model.synopsis == "Gets things."
        assert model.description == "First paragraph.\n\nSecond paragraph."
        assert model.notes == "Be careful."
        assert [(t.type_name, t.description) for t in model.inputs] == [("System.String", "A name.")]
        assert [t.type_name for t in model.outputs] == ["Thing"]
        assert [(l.title, l.uri) for l in model.related_links] == [
            ("Online", "https://example.org/get-thing"),
            ("Set-Thing", None),
        ]

    def test_syntax_and_parameters(self, parser):
        """Test syntax sets and detailed parameters."""
        model = parser.parse(STRUCTURED_HELP)

        (syntax,) = model.syntax
        assert syntax.name == "Get-Thing"
        assert [(p.name, p.type, p.required) for p in syntax.parameters] == [("Name", "string", True)]

        (param,) = model.parameters
        assert param.type == "System.String"
        assert param.description == "The name."
        assert param.position == "0"
        assert param.supports_wildcards is False
        assert param.pipeline_input == "True (ByValue)"
        assert param.aliases == ("n",)

    def test_structured_examples(self, parser):
        """Test that the introduction joins the code before segmenting."""
        (example,) = parser.parse(STRUCTURED_HELP).examples

        assert example.title == "Example 1"
        assert example.code == "PS C:\\> Get-Thing -Name a"
        assert example.remarks == "Gets a."
        assert example.mode == "structured:prompt"

    def test_auto_prefers_raw_examples(self, parser):
        """Test that raw examples replace structured ones in auto mode."""
        model = parser.parse(STRUCTURED_HELP, raw_dump=RAW_EXAMPLES)
        assert [e.mode for e in model.examples] == ["raw:prompt", "raw:trailing-narrative"]

    def test_structured_mode_ignores_raw(self, parser):
        """Test the structured examples mode."""
        model = parser.parse(STRUCTURED_HELP, raw_dump=RAW_EXAMPLES, examples_mode=ExamplesMode.STRUCTURED)
        assert [e.mode for e in model.examples] == ["structured:prompt"]

    def test_raw_mode_without_raw_examples(self, parser):
        """Test that raw mode never falls back to structured examples."""
        model = parser.parse(STRUCTURED_HELP, raw_dump="NAME\nGet-Thing\n", examples_mode=ExamplesMode.RAW)
        assert model.examples == ()

    def test_object_graph(self, parser):
        """Test attribute-based snapshots."""
        snapshot = SimpleNamespace(
            Name="Set-Thing",
            Synopsis="Sets things.",
            Parameters=SimpleNamespace(
                Parameter=[SimpleNamespace(Name="Path", Type=SimpleNamespace(Name="string"), Required=True)],
            ),
        )
        model = parser.parse(snapshot)

        assert model.name == "Set-Thing"
        assert model.synopsis == "Sets things."
        assert [(p.name, p.type, p.required) for p in model.parameters] == [("Path", "string", True)]

    def test_broken_snapshot_falls_back_to_raw(self, parser):
        """Test that an exception while reading falls back to the raw dump."""

        class Broken:
            @property
            def Name(self):
                raise RuntimeError("boom")

        model = parser.parse(Broken(), raw_dump="SYNOPSIS\nFrom text.\n", fallback_name="Get-Thing")
        assert model.name == "Get-Thing"
        assert model.synopsis == "From text."

    def test_empty_snapshot_falls_back(self, parser):
        """Test that a snapshot without usable fields uses the raw dump."""
        model = parser.parse({"Unrelated": 1}, raw_dump=None, fallback_name="Get-Thing")
        assert model.name == "Get-Thing"
        assert model.parameters == ()

    def test_to_dict(self, parser):
        """Test that the model serializes to plain data."""
        data = parser.parse(STRUCTURED_HELP).to_dict()
        assert data["name"] == "Get-Thing"
        assert data["parameters"][0]["aliases"] == ["n"]
        assert data["examples"][0]["mode"] == "structured:prompt"
