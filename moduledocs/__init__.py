"""
moduledocs - documentation content resolution for software modules.

Decides which standard documents (README / CHANGELOG / LICENSE / UPGRADE)
to surface from local folders and an optional remote repository, and
turns command help dumps into typed reference models with examples split
into code and narrative.
"""

__version__ = "0.1.0"
