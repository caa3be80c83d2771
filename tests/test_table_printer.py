from pgvet.table_printer import (
    format_cell,
    format_table,
    locale_from_environment,
    set_locale_from_environment,
)
import locale
import re
import unittest

DELIMITER = re.compile(r":?-+:?")


def cells(line):
    return line.split("|")[1:-1]


class TestTablePrinter(unittest.TestCase):
    def setUp(self):
        locale.setlocale(locale.LC_NUMERIC, "C")

    def tearDown(self):
        locale.setlocale(locale.LC_NUMERIC, "C")

    def assertDelimiterLine(self, line, columns):
        delimiters = cells(line)
        self.assertEqual(len(delimiters), columns)
        for cell in delimiters:
            self.assertRegex(cell.strip(), DELIMITER)

    def test_format_table(self):
        table = format_table(["Name", "Rows"], [["a", 1000], ["bb", 5]])
        lines = table.splitlines()

        self.assertTrue(table.endswith("\n"))
        self.assertEqual(len(lines), 4)
        self.assertEqual([c.strip() for c in cells(lines[0])], ["Name", "Rows"])
        self.assertDelimiterLine(lines[1], 2)
        self.assertEqual([c.strip() for c in cells(lines[2])], ["a", "1000"])
        self.assertEqual([c.strip() for c in cells(lines[3])], ["bb", "5"])

        # All lines have the same width
        self.assertEqual(len({len(line) for line in lines}), 1)

        # Text on the left, numbers on the right
        name, rows = cells(lines[3])
        self.assertTrue(name[1:].startswith("bb "))
        self.assertTrue(rows[:-1].endswith(" 5"))

    def test_mixed_column_is_left_aligned(self):
        lines = format_table(["Value"], [[1], ["x"]]).splitlines()

        cell = cells(lines[2])[0]
        self.assertTrue(cell[1:].startswith("1 "))

    def test_numbers_keep_locale_formatting(self):
        lines = format_table(["Size"], [[1.5], [1000]]).splitlines()

        self.assertEqual(cells(lines[2])[0].strip(), "1.500000")
        self.assertEqual(cells(lines[3])[0].strip(), "1000")

    def test_one_character_columns(self):
        lines = format_table(["T", "N"], [["P", 1], ["U", 2]]).splitlines()

        self.assertDelimiterLine(lines[1], 2)
        for cell in cells(lines[1]):
            self.assertIn("-", cell)
        self.assertEqual([c.strip() for c in cells(lines[2])], ["P", "1"])

    def test_short_and_long_rows(self):
        lines = format_table(["A", "B"], [["x"], ["y", "z", "ignored"]]).splitlines()

        self.assertEqual(len(lines), 4)
        self.assertDelimiterLine(lines[1], 2)
        self.assertEqual([c.strip() for c in cells(lines[2])], ["x", ""])
        self.assertEqual([c.strip() for c in cells(lines[3])], ["y", "z"])
        self.assertNotIn("ignored", lines[3])

    def test_prefix(self):
        table = format_table(["N"], [[7]], prefix="> ")

        for line in table.splitlines():
            self.assertTrue(line.startswith("> |"))

    def test_no_rows(self):
        lines = format_table(["Size"], []).splitlines()

        self.assertEqual(len(lines), 2)
        self.assertEqual([c.strip() for c in cells(lines[0])], ["Size"])
        self.assertDelimiterLine(lines[1], 1)

    def test_format_cell(self):
        self.assertEqual(format_cell(1234567), "1234567")
        self.assertEqual(format_cell(1.5), "1.500000")
        self.assertEqual(format_cell(True), "True")
        self.assertEqual(format_cell("N"), "N")

    def test_locale_from_environment(self):
        environment = {"LC_ALL": "", "LC_NUMERIC": "de_DE.UTF-8", "LANG": "en_US"}
        self.assertEqual(locale_from_environment(environment), "de_DE")

        self.assertEqual(locale_from_environment({"LANG": "en-US.UTF-8"}), "en_US")
        self.assertEqual(locale_from_environment({"LANG": "sr_RS@latin"}), "sr_RS")
        self.assertEqual(locale_from_environment({}), "")

    def test_unknown_locale(self):
        with self.assertLogs(level="WARNING"):
            name = set_locale_from_environment({"LANG": "xx_YY"})

        self.assertEqual(name, "C")
        self.assertEqual(format_cell(1000), "1000")


if __name__ == "__main__":
    unittest.main()
