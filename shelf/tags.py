# shelf/tags.py
import re
from typing import List

# Either a quoted run (which may hold commas) or a run up to the next comma.
_TAG_RE = re.compile(r'\s*(?:"([^"]*)"|([^,]+))')


def split_tags(raw: str | None) -> List[str]:
    """
    Split a multi-value cell such as 'Fantasy, "Sci-Fi, Horror"' into
    ['Fantasy', 'Sci-Fi, Horror'].
    """
    if not raw:
        return []
    tags: List[str] = []
    for m in _TAG_RE.finditer(raw):
        quoted, bare = m.groups()
        tag = (quoted if quoted is not None else bare).strip()
        if tag:
            tags.append(tag)
    return tags
