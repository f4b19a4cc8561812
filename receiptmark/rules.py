"""
Front-matter dialect rules.

This file exists to make the dialect's fixed choices explicit and enforceable.
"""

ENVELOPE_DELIMITER = "---"
TAB_WIDTH = 4  # a leading tab counts as exactly this many spaces
INDENT_STEP = 2
SEQUENCE_MARKER = "- "
KEY_DELIMITER = ": "
LITERAL_BLOCK = "|-"
SENTINEL_KEY = "__items"  # list items with no key to hang from
NULL_TOKEN = "null"
