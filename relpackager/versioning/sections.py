# Copyright 2025 Roger Cibrian
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Sanitizing and tokenizing of version sections.

A version string is made of up to three sections (release, prerelease,
build metadata). Each section is turned into an ordered tuple of parts,
where every part is either a non-negative int or an opaque str token.
"""

from __future__ import annotations

import re
from typing import Union

SectionPart = Union[int, str]

_DISALLOWED = re.compile(r"[^0-9A-Za-z.\-]")
_DIGITS = re.compile(r"[0-9]+")


def sanitize(text: str) -> str:
    """Replace every character outside [0-9A-Za-z.-] with a dot.

    The result always has the same length as the input, and sanitizing
    twice gives the same result as sanitizing once.

    Example:
        >>> sanitize("1.2_3 beta")
        '1.2.3.beta'
    """
    return _DISALLOWED.sub(".", text)


def tokenize(section: str) -> tuple[SectionPart, ...]:
    """Split a section into its dot-separated parts.

    Rules, applied per token after sanitizing and splitting on ".":
      - empty token that is not the last one -> 0 (marks a gap)
      - empty last token -> dropped (absorbs a trailing dot)
      - ASCII digits only -> int
      - anything else -> the token itself

    Example:
        >>> tokenize("a..b")
        ('a', 0, 'b')
        >>> tokenize("1.2.")
        (1, 2)
        >>> tokenize("")
        ()
    """
    tokens = sanitize(section).split(".")
    last = len(tokens) - 1

    parts: list[SectionPart] = []
    for index, token in enumerate(tokens):
        if not token:
            if index != last:
                parts.append(0)
            continue
        if _DIGITS.fullmatch(token):
            parts.append(int(token))
        else:
            parts.append(token)
    return tuple(parts)


def join_parts(parts: tuple[SectionPart, ...] | list[SectionPart]) -> str:
    """Render parts back into a dot-separated string."""
    return ".".join(str(p) for p in parts)
