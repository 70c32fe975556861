#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/flaremark/renderers/images.py
"""Inline/block classification of images.

The rules are applied in a fixed order and the first one that decides wins:

1. a class containing ``inline`` (``IconInline``, ``inline-icon``) -> inline
2. a ``gui``, ``icon(s)`` or ``button(s)`` path segment -> inline
3. every declared dimension at or below ``max_size`` pixels -> inline
4. the only image of its inline run, with at most ``text_threshold``
   non-whitespace characters around it -> block
5. anything else (an image inside running text) -> inline

"""

from __future__ import annotations

import re
from typing import Literal, Optional, Sequence

from flaremark.ast.nodes import Code, Image, LineBreak, Node, Text, VariablePlaceholder, get_node_children
from flaremark.constants import DEFAULT_INLINE_IMAGE_MAX_SIZE, DEFAULT_SOLE_IMAGE_TEXT_THRESHOLD, ICON_PATH_PATTERN

ImagePlacement = Literal["inline", "block"]

_ICON_PATH_RE = re.compile(ICON_PATH_PATTERN, re.IGNORECASE)


def classify_image(
    image: Image,
    run: Optional[Sequence[Node]] = None,
    max_size: int = DEFAULT_INLINE_IMAGE_MAX_SIZE,
    text_threshold: int = DEFAULT_SOLE_IMAGE_TEXT_THRESHOLD,
) -> ImagePlacement:
    """Decide whether an image is rendered inline or as a block.

    Parameters
    ----------
    image : Image
        Image to classify
    run : sequence of Node or None, default None
        Inline run the image belongs to. None means the image stands alone.
    max_size : int, default 32
        Largest declared dimension of an inline icon
    text_threshold : int, default 3
        Surrounding characters tolerated for a sole image

    Returns
    -------
    {"inline", "block"}
        Placement of the image

    Examples
    --------
    >>> classify_image(Image(url="big.png", classes=("inline-icon",), width=400))
    'inline'
    >>> classify_image(Image(url="Images/screen.png"))
    'block'

    """
    if any("inline" in css_class.lower() for css_class in image.classes):
        return "inline"
    if _ICON_PATH_RE.search(image.url):
        return "inline"
    dimensions = [d for d in (image.width, image.height) if d is not None]
    if dimensions and all(d <= max_size for d in dimensions):
        return "inline"
    if run is None:
        return "block"

    images: list[Image] = []
    text: list[str] = []
    _scan_run(run, images, text)
    if len(images) == 1 and images[0] is image:
        surrounding = sum(1 for char in "".join(text) if not char.isspace())
        if surrounding <= text_threshold:
            return "block"
    return "inline"


def _scan_run(nodes: Sequence[Node], images: list[Image], text: list[str]) -> None:
    for node in nodes:
        if isinstance(node, Image):
            images.append(node)
        elif isinstance(node, (Text, Code)):
            text.append(node.content)
        elif isinstance(node, VariablePlaceholder):
            text.append(node.value or node.name)
        elif not isinstance(node, LineBreak):
            _scan_run(get_node_children(node), images, text)
