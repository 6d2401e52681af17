"""
Spreadsheet column numbering: bijective base-26 ("A" = 1, "Z" = 26, "AA" = 27).
"""

import string

ALPHABET = string.ascii_uppercase
RADIX = len(ALPHABET)


def column_no_to_name(number: int) -> str:
    """
    Convert a 1-based column number to its letter name.

    Examples:
        >>> column_no_to_name(1)
        'A'
        >>> column_no_to_name(50)
        'AX'
        >>> column_no_to_name(0)
        ''
    """
    letters = []
    while number > 0:
        number, digit = divmod(number - 1, RADIX)
        letters.append(ALPHABET[digit])
    return "".join(reversed(letters))


def column_name_to_no(name) -> int:
    """
    Convert a column name to its 1-based number; 0 when blank or invalid.

    Examples:
        >>> column_name_to_no("AX")
        50
        >>> column_name_to_no("ax")
        50
        >>> column_name_to_no("A1")
        0
    """
    if not name or not name.strip():
        return 0
    number = 0
    for letter in name.strip().upper():
        if letter not in ALPHABET:
            return 0
        number = number * RADIX + ALPHABET.index(letter) + 1
    return number
