"""Heuristic file type classification by URL shape

Rules are evaluated top to bottom and the first match wins. This is a guess
based on how GitHub lays out its URLs, not content sniffing.
"""

import re
from typing import TypeAlias


TypeRule: TypeAlias = tuple[re.Pattern, str]

TYPE_RULES: tuple[TypeRule, ...] = (
    (re.compile(r'/releases/'), 'Release'),
    (re.compile(r'/archive/'), 'Source Code'),
    (re.compile(r'raw\.github'), 'Raw File'),
    (re.compile(r'\.(zip|rar|7z|tar|gz)$', re.IGNORECASE), 'Archive'),
    (re.compile(r'\.(exe|msi|apk|dmg|iso)$', re.IGNORECASE), 'Binary'),
)
DEFAULT_TYPE = 'File'


def classify_target(url: str, rules: tuple[TypeRule, ...] = TYPE_RULES, default: str = DEFAULT_TYPE) -> str:
    """Return the label of the first rule whose pattern matches `url`

    Example:
        >>> classify_target('https://github.com/a/b/releases/download/v1/app.exe')
        'Release'
        >>> classify_target('https://gist.githubusercontent.com/a/1/raw/x.tar')
        'Archive'
        >>> classify_target('https://github.com/a/b')
        'File'
    """
    for pattern, label in rules:
        if pattern.search(url):
            return label
    return default
