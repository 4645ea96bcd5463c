"""Reusable helpers for composing plain-text chat messages."""

from __future__ import annotations
from tracking import t

from typing import Iterable, List


class TextBlockBuilder:
    """Utility for building multi-line messages with bullet support."""

    __slots__ = ("_lines",)

    def __init__(self) -> None:
        t("botapp.ui.text_blocks.TextBlockBuilder.__init__")
        self._lines: List[str] = []

    def line(self, text: str = "") -> "TextBlockBuilder":
        t('botapp.ui.text_blocks.TextBlockBuilder.line')
        self._lines.append(text)
        return self

    def heading(self, text: str) -> "TextBlockBuilder":
        t('botapp.ui.text_blocks.TextBlockBuilder.heading')
        if text:
            self._lines.append(text)
        return self

    def field(self, label: str, value: object) -> "TextBlockBuilder":
        t('botapp.ui.text_blocks.TextBlockBuilder.field')
        if value is not None and value != "":
            self._lines.append(f"{label}: {value}")
        return self

    def bullet(self, text: str, *, indent: int = 0) -> "TextBlockBuilder":
        t('botapp.ui.text_blocks.TextBlockBuilder.bullet')
        if text:
            self._lines.append(f"{' ' * indent}• {text}")
        return self

    def bullets(self, items: Iterable[str], *, indent: int = 0) -> "TextBlockBuilder":
        t('botapp.ui.text_blocks.TextBlockBuilder.bullets')
        for item in items:
            self.bullet(item, indent=indent)
        return self

    def blank(self) -> "TextBlockBuilder":
        t('botapp.ui.text_blocks.TextBlockBuilder.blank')
        self._lines.append("")
        return self

    def build(self) -> str:
        t('botapp.ui.text_blocks.TextBlockBuilder.build')
        return "\n".join(self._lines).rstrip()


class TextBuilderBase:
    """Shared base for components that construct messages via builders."""

    def __init__(self, builder_factory=TextBlockBuilder) -> None:
        t("botapp.ui.text_blocks.TextBuilderBase.__init__")
        self._builder_factory = builder_factory

    def create_builder(self) -> TextBlockBuilder:
        """Return a new builder instance for composing a message."""
        t('botapp.ui.text_blocks.TextBuilderBase.create_builder')

        return self._builder_factory()


__all__ = ["TextBlockBuilder", "TextBuilderBase"]
