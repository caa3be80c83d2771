import locale
import logging
import os

from tabulate import tabulate

LOCALE_VARIABLES = ["LC_ALL", "LC_NUMERIC", "LANG"]


def locale_from_environment(environment=None):
    """Returns the language and territory part of the user's numeric locale.

    Locales look like language[_territory][.codeset][@modifier]; an empty
    string is returned if none of the locale variables is set.
    """
    if environment is None:
        environment = os.environ
    for variable in LOCALE_VARIABLES:
        value = environment.get(variable)
        if value:
            return value.split(".", 1)[0].split("@", 1)[0].replace("-", "_", 1)
    return ""


def set_locale_from_environment(environment=None):
    name = locale_from_environment(environment)
    try:
        # The codeset is dropped above, so let the C library pick it
        locale.setlocale(locale.LC_NUMERIC, name)
    except locale.Error:
        try:
            locale.setlocale(locale.LC_NUMERIC, f"{name}.UTF-8")
        except locale.Error:
            logging.warning(f"Locale {name!r} not available, using the C locale")
            locale.setlocale(locale.LC_NUMERIC, "C")
            return "C"
    logging.debug(f"Numeric locale: {locale.setlocale(locale.LC_NUMERIC)}")
    return name


def is_number(value):
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def format_cell(value):
    if isinstance(value, bool):
        return str(value)
    if isinstance(value, int):
        return locale.format_string("%d", value, grouping=True)
    if isinstance(value, float):
        return locale.format_string("%f", value, grouping=True)
    return str(value)


def format_table(headers, rows, prefix=""):
    """Formats the rows as a GitHub-compatible Markdown table.

    Columns containing nothing but numbers are right aligned, all others are
    left aligned. Short rows are padded with empty cells, cells beyond the
    headers are ignored. Every line starts with `prefix`.
    """
    string_rows = []
    for row in rows:
        cells = [format_cell(cell) for cell in row[: len(headers)]]
        string_rows.append(cells + [""] * (len(headers) - len(cells)))

    colalign = []
    for i in range(len(headers)):
        numeric = all(i < len(row) and is_number(row[i]) for row in rows)
        colalign.append("right" if numeric else "left")

    # Cells are already formatted for the locale
    table = tabulate(
        string_rows,
        headers=headers,
        tablefmt="github",
        colalign=colalign,
        disable_numparse=True,
    )
    return "".join(prefix + line + "\n" for line in table.splitlines())
