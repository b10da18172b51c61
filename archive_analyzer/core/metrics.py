"""Line counting for decoded text content."""

import re
from typing import Optional

_LINE_ENDING = re.compile(r"\r\n?")


def count_lines(content: Optional[str]) -> int:
    """Count newline-delimited segments in ``content``.
    
    CRLF and bare CR are treated as LF. This is a segment count, so a
    trailing newline contributes one trailing empty line:
    - 'a\\nb\\nc' -> 3
    - 'a\\nb\\nc\\n' -> 4
    - '' or None -> 0
    """
    if not content:
        return 0
    normalized = _LINE_ENDING.sub("\n", content)
    return normalized.count("\n") + 1
