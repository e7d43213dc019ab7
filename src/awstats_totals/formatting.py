"""
Format numbers for display in the report.

The decimal point and thousands separator are configurable, because
AWStats installations are used all over the world -- e.g. ``1 234.5``
in one place and ``1.234,5`` in another.
"""

import humanize


UNIT_PREFIXES = ("", "K", "M", "G", "T", "P", "E", "Z", "Y", "R", "Q")


def _group_digits(
    number: int | float,
    decimals: int,
    *,
    dec_point: str,
    thousands_sep: str,
    strip_zeros: bool = False,
) -> str:
    """
    Format a number with a fixed number of decimals and grouped thousands,
    using the given separators.
    """
    if decimals > 0:
        formatted = humanize.intcomma(number, ndigits=decimals)
    else:
        formatted = humanize.intcomma(int(round(number)))

    if strip_zeros and "." in formatted:
        formatted = formatted.rstrip("0").rstrip(".")

    # ``intcomma`` uses the English separators; swap both in a single
    # pass so e.g. "," -> "." -> "," can't happen.
    return formatted.translate(str.maketrans({",": thousands_sep, ".": dec_point}))


def num_format(
    number: int | float | None,
    decimals: int = 0,
    *,
    dec_point: str = ".",
    thousands_sep: str = " ",
) -> str:
    """
    Format a number with the configured separators, e.g. ``1 234 567``.

    Missing values (e.g. the visits in a month with no data) are shown
    as an empty string.
    """
    if number is None:
        return ""

    return _group_digits(
        number, decimals, dec_point=dec_point, thousands_sep=thousands_sep
    )


def byte_format(
    number: int | float | None,
    decimals: int = 2,
    *,
    dec_point: str = ".",
    thousands_sep: str = " ",
) -> str:
    """
    Format a number of bytes as a human-readable size, e.g.

        >>> byte_format(1)
        '1 Bytes'

        >>> byte_format(1536)
        '1.5 KB'

        >>> byte_format(1073741824)
        '1 GB'

    """
    if not number:
        return "0 Bytes"

    value = float(number)
    i = 0

    while value >= 1024 and i < len(UNIT_PREFIXES) - 1:
        value /= 1024
        i += 1

    formatted = _group_digits(
        value,
        decimals,
        dec_point=dec_point,
        thousands_sep=thousands_sep,
        strip_zeros=True,
    )

    if i == 0:
        return f"{formatted} Bytes"
    else:
        return f"{formatted} {UNIT_PREFIXES[i]}B"
