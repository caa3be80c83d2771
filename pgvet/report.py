import datetime
import logging

from .ranking import rank_duplicate_sets, rank_redundant_pairs, rank_unused_for_report
from .table_printer import format_table
from .utils import b_to_mib, human_readable_size

INDEX_HEADINGS = ["Table", "Index", "T", "Size (MiB)", "Rows", "Scans", "Attrs"]
PAIR_HEADINGS = [
    "Table",
    "Index1",
    "Index2",
    "T",
    "Size (MiB)",
    "Rows",
    "Scans",
    "Attrs1",
    "Attrs2",
]

MARKDOWN_REPORT = """\
# pgvet report for database "{database}"

Connection info:

* Host: {host}
* Port: {port}
* User: {user}
* Database: {database}
* Server version: {server_version}
* Schema: {namespace}

## Duplicate Indexes

Sets of duplicate indexes found: {number_of_duplicate_index_sets}

Indexes in this section share an exact definition with at least one other index.
It is therefore always safe to drop one of the two.

{duplicate_index_sets}

## Redundant Indexes

Pairs of redundant indexes found: {number_of_redundant_index_pairs}

In the following table, "Index1" refers to the redundant index, and "Attrs1" its
columns/expressions. It is usually safe to drop an index that is a prefix of
another index, as the latter can satisfy the same query plans.

{redundant_index_pairs}

## Unused Indexes

Unused indexes found: {number_of_unused_indexes}

Criteria for inclusion in this report:

* Scanned at most {unused_cutoff} times.
* Size greater than or equal to {min_index_size}.
* Contains at least {min_index_rows} rows.
* Is either non-unique or is a primary key.

**Important:** this section of the report relies on usage statistics, and will
only contain meaningful results if pgvet was run against a production database.

Note: unique indexes are not included because they enforce a constraint and
cannot be dropped simply because they aren't used in query plans (when a unique
index prevents its constraint from being violated, it is not recorded as a
"scan"). Primary key indexes, however, _are_ included: a primary key that is
never scanned is often a sign of a design flaw.

{unused_indexes}

*Generated at {now}*
"""


class ReportPrinter:
    def __init__(
        self,
        connection_info,
        duplicate_index_sets,
        unused_indexes,
        redundant_index_pairs,
        unused_cutoff,
        min_index_size,
        min_index_rows,
        namespace="public",
        server_version="unknown",
    ):
        logging.debug("Init ReportPrinter")
        self.connection_info = connection_info
        self.namespace = namespace
        self.server_version = server_version
        self.unused_cutoff = unused_cutoff
        self.min_index_size = min_index_size
        self.min_index_rows = min_index_rows

        self.duplicate_index_sets = rank_duplicate_sets(duplicate_index_sets)
        self.redundant_index_pairs = rank_redundant_pairs(redundant_index_pairs)
        self.unused_indexes = rank_unused_for_report(
            unused_indexes, min_index_size, min_index_rows
        )

    def generate(self, stream, now=None):
        stream.write(self.render(now))

    def render(self, now=None):
        if now is None:
            now = datetime.datetime.now().astimezone()
        return MARKDOWN_REPORT.format(
            host=self.connection_info.get("host"),
            port=self.connection_info.get("port"),
            user=self.connection_info.get("user"),
            database=self.connection_info.get("database"),
            server_version=self.server_version,
            namespace=self.namespace,
            number_of_duplicate_index_sets=len(self.duplicate_index_sets),
            duplicate_index_sets=self.format_duplicate_index_sets(),
            number_of_redundant_index_pairs=len(self.redundant_index_pairs),
            redundant_index_pairs=self.format_redundant_index_pairs(),
            number_of_unused_indexes=len(self.unused_indexes),
            unused_cutoff=self.unused_cutoff,
            min_index_size=human_readable_size(self.min_index_size),
            min_index_rows=self.min_index_rows,
            unused_indexes=self.format_unused_indexes(),
            now=now.strftime("%a, %d %b %Y %H:%M:%S %Z"),
        )

    def format_duplicate_index_sets(self):
        return "\n\n".join(
            indexes_table(duplicates) for duplicates in self.duplicate_index_sets
        )

    def format_redundant_index_pairs(self):
        if not self.redundant_index_pairs:
            return ""
        rows = []
        for redundant, subsuming in self.redundant_index_pairs:
            rows.append(
                [
                    redundant.qualified_table_name(),
                    redundant.name,
                    subsuming.name,
                    redundant.kind(),
                    int(b_to_mib(redundant.size)),
                    redundant.num_rows,
                    redundant.num_scans,
                    redundant.joined_attrs(),
                    subsuming.joined_attrs(),
                ]
            )
        return format_table(PAIR_HEADINGS, rows)

    def format_unused_indexes(self):
        if not self.unused_indexes:
            return ""
        return indexes_table(self.unused_indexes)


def indexes_table(indexes):
    rows = []
    for index in indexes:
        rows.append(
            [
                index.qualified_table_name(),
                index.name,
                index.kind(),
                int(b_to_mib(index.size)),
                index.num_rows,
                index.num_scans,
                index.joined_attrs(),
            ]
        )
    return format_table(INDEX_HEADINGS, rows)
