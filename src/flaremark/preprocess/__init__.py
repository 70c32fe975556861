#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/flaremark/preprocess/__init__.py
"""Preprocessing stages run between parsing and rendering.

- resolver: loading of variable tables and fragments
- repair: structural repair of list containment
- normalizer: resolution of authoring extensions and conditional exclusion
- glossary: reading of glossary files and their layout as a document
"""

from flaremark.preprocess.glossary import GlossaryEntry, build_glossary_document, parse_flglo
from flaremark.preprocess.normalizer import (
    ExtensionNormalizer,
    NormalizationResult,
    compile_exclusion_patterns,
    rewrite_topic_target,
)
from flaremark.preprocess.repair import StructuralRepairTransformer, repair_tree
from flaremark.preprocess.resolver import (
    ContentLoader,
    FileSystemLoader,
    FragmentCache,
    FragmentEntry,
    MemoryLoader,
    VariableTable,
    normalize_path,
    parse_flvar,
)

__all__ = [
    "ContentLoader",
    "ExtensionNormalizer",
    "FileSystemLoader",
    "FragmentCache",
    "FragmentEntry",
    "GlossaryEntry",
    "MemoryLoader",
    "NormalizationResult",
    "StructuralRepairTransformer",
    "VariableTable",
    "build_glossary_document",
    "compile_exclusion_patterns",
    "normalize_path",
    "parse_flglo",
    "parse_flvar",
    "repair_tree",
    "rewrite_topic_target",
]
