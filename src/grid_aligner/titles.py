"""
Number extraction from free-text item titles.

The rule is fixed: the number of a title is the last run of decimal digits
anywhere in the (optionally normalized) title. ``"Name_01"`` gives 1,
``"Name0003"`` gives 3 and ``"Name 10a2"`` gives 2.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

_DIGIT_RUN_RE = re.compile(r"[0-9]+")
_EXTENSION_RE = re.compile(r"\.[A-Za-z]{2}[A-Za-z0-9]{0,3}$")
_COPY_SUFFIX_RE = re.compile(
    r"\s*(?:\(\s*copy(?:\s+\d+)?\s*\)|-\s*copy)\s*$",
    re.IGNORECASE,
)


def normalize_label(
    label: str,
    *,
    strip_extension: bool = False,
    strip_copy_suffix: bool = False,
) -> str:
    """Strip a trailing copy marker and/or file extension from a label."""
    text = label.strip()
    if strip_copy_suffix:
        text = _COPY_SUFFIX_RE.sub("", text)
    if strip_extension:
        text = _EXTENSION_RE.sub("", text)
        if strip_copy_suffix:
            # "photo (copy).png" carries the marker before the extension
            text = _COPY_SUFFIX_RE.sub("", text)
    return text


def extract_number(
    label: str,
    *,
    strip_extension: bool = False,
    strip_copy_suffix: bool = False,
) -> int | None:
    """
    Return the last integer found in ``label``, or None.

    Leading zeros are dropped. There is no upper bound on the value.
    """
    text = normalize_label(
        label,
        strip_extension=strip_extension,
        strip_copy_suffix=strip_copy_suffix,
    )
    runs = _DIGIT_RUN_RE.findall(text)
    if not runs:
        return None
    return int(runs[-1], 10)


@dataclass(frozen=True, slots=True)
class TitlePolicy:
    """Normalization flags applied before number extraction."""

    strip_extension: bool = False
    strip_copy_suffix: bool = False

    def normalize(self, label: str) -> str:
        return normalize_label(
            label,
            strip_extension=self.strip_extension,
            strip_copy_suffix=self.strip_copy_suffix,
        )

    def extract(self, label: str) -> int | None:
        return extract_number(
            label,
            strip_extension=self.strip_extension,
            strip_copy_suffix=self.strip_copy_suffix,
        )
