"""Reduces doc comments to a single card-sized sentence."""

from __future__ import annotations


def first_sentence(paragraph: str) -> str:
    """Return the text before the first period, flattened onto one line.

    No sentence-boundary detection is attempted: abbreviations and decimals
    split just like a full stop does.
    """
    sentence = paragraph.split(".")[0]
    return _trim(sentence) + "."


def _trim(text: str) -> str:
    text = text.strip()
    text = text.replace("\n", " ")
    return text.replace("\t", "")


__all__ = ["first_sentence"]
