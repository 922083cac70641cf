# -*- coding: utf-8 -*-
"""
Text normaliser for raw pod log text.

Firmware on both pod families wraps long messages: the remainder of a
message is written on the following line(s), indented.  Operators also
annotate logs by hand and the annotations are full of contractions,
which trip up the marker patterns used further down the pipeline.

``normalize`` merges the wrapped lines back onto their first line and
then expands the contractions.
"""

import re


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

# Negative-auxiliary contractions and their expansions
CONTRACTIONS = [
    ("can't", "cannot"),
    ("won't", "will not"),
    ("don't", "do not"),
    ("doesn't", "does not"),
    ("didn't", "did not"),
    ("isn't", "is not"),
    ("aren't", "are not"),
    ("wasn't", "was not"),
    ("weren't", "were not"),
    ("hasn't", "has not"),
    ("haven't", "have not"),
    ("hadn't", "had not"),
    ("shouldn't", "should not"),
    ("wouldn't", "would not"),
    ("couldn't", "could not"),
    ("mightn't", "might not"),
    ("mustn't", "must not"),
]

_CONTRACTION_PATTERNS = [
    (re.compile(r"\b" + re.escape(short) + r"\b", re.IGNORECASE), long_form)
    for short, long_form in CONTRACTIONS
]

_LEADING_WHITESPACE = re.compile(r"^\s+")


# ---------------------------------------------------------------------------
# Continuation merge
# ---------------------------------------------------------------------------

def merge_continuation_lines(lines):
    """Merge indented continuation lines onto the line they continue.

    A line is a continuation when it starts with whitespace and a line
    is already being accumulated.  Anything else closes the current
    accumulator (emitting it when non-empty) and opens a new one.
    """
    merged = []
    current = ""

    for line in lines:
        if current and _LEADING_WHITESPACE.match(line):
            current = current + " " + line.strip()
            continue
        if current:
            merged.append(current)
        current = line

    if current:
        merged.append(current)
    return merged


# ---------------------------------------------------------------------------
# Contraction expansion
# ---------------------------------------------------------------------------

def expand_contractions(lines):
    """Expand contractions on every line (whole words, any case)."""
    expanded = []
    for line in lines:
        for pattern, replacement in _CONTRACTION_PATTERNS:
            line = pattern.sub(replacement, line)
        expanded.append(line)
    return expanded


def normalize(lines):
    """Merge continuation lines, then expand contractions."""
    if not lines:
        return []
    return expand_contractions(merge_continuation_lines(lines))
