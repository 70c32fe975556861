#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/flaremark/parsers/__init__.py
"""Parsers turning Flare topic markup into trees."""

from flaremark.parsers.base import BaseParser
from flaremark.parsers.flare import FlareParser, is_internal_topic_link, split_anchor

__all__ = ["BaseParser", "FlareParser", "is_internal_topic_link", "split_anchor"]
