"""
Fixed CSV codec rules.

This file exists to keep the dialect explicit: one delimiter, one quote
character, LF row separators. Anything else is out of scope.
"""

DELIMITER = ","
QUOTE = '"'
ESCAPED_QUOTE = QUOTE * 2
ROW_SEPARATOR = "\n"

# Characters that force a field to be quoted on output.
SPECIAL_CHARACTERS = (DELIMITER, QUOTE, ROW_SEPARATOR)

# Sequence values are flattened into a single field with this joiner.
SEQUENCE_JOINER = ", "

# A document needs a header line plus at least one data line.
MIN_DOCUMENT_LINES = 2
