"""
Help Layer - command help parsing and example segmentation.
"""

from moduledocs.help.models import (
    CommandHelpModel,
    ExampleHelp,
    ExamplesMode,
    ParameterHelp,
    RelatedLink,
    SyntaxSet,
    TypeHelp,
)
from moduledocs.help.segmenter import ExampleSegmenter, SegmentedExample
from moduledocs.help.parser import HelpContentParser
from moduledocs.help.source import HelpSourceConfig, PowerShellHelpSource, load_command_help, load_many

__all__ = [
    # models
    "CommandHelpModel",
    "ExampleHelp",
    "ExamplesMode",
    "ParameterHelp",
    "RelatedLink",
    "SyntaxSet",
    "TypeHelp",
    # segmentation
    "ExampleSegmenter",
    "SegmentedExample",
    # parsing
    "HelpContentParser",
    # source
    "HelpSourceConfig",
    "PowerShellHelpSource",
    "load_command_help",
    "load_many",
]
