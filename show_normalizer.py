"""
Segment cleaning helpers shared by the parser and the planner.

Internal segments are kept lower-case and dot-joined so they compare stably;
only the show name is re-cased (via title_case) when the final filename is
built.
"""

import re

# Lower-cased unless they open the name
STOPWORDS = frozenset({"the", "of", "and"})

_WHITESPACE = re.compile(r"\s")
_DOT_RUN = re.compile(r"\.{2,}")


def normalize(text: str) -> str:
    """Clean a filename segment into its internal dotted form.

    'Some Show '     -> 'some.show'
    '..Pilot  Part.' -> 'pilot.part'
    '.'              -> '.'
    """
    cleaned = _WHITESPACE.sub(".", text.strip())
    cleaned = _DOT_RUN.sub(".", cleaned)
    if cleaned != ".":
        cleaned = cleaned.strip(".")
    # Characters that grow when lower-cased ('İ') keep their case
    return "".join(lc if len(lc := c.lower()) == 1 else c for c in cleaned)


def title_case(text: str) -> str:
    """Capitalize each dotted word, keeping non-leading stopwords lower-case.

    'war.of.the.worlds' -> 'War.of.the.Worlds'
    'the.great.war'     -> 'The.Great.War'
    '.x..men.'          -> 'X.Men'
    """
    words = [w for w in text.split(".") if w]
    out: list[str] = []
    for idx, word in enumerate(words):
        if idx > 0 and word.lower() in STOPWORDS:
            out.append(word.lower())
        else:
            out.append(word[:1].upper() + word[1:])
    return ".".join(out)
