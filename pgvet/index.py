from functools import total_ordering

# Index kinds, as printed in the "T" column of the report
PRIMARY_KEY = "P"
UNIQUE_INDEX = "U"
NON_UNIQUE_INDEX = "N"


class MalformedIndexDescriptor(ValueError):
    def __init__(self, index, reason):
        self.index = index
        super().__init__(
            f"Malformed index descriptor {index.name!r} "
            f"on table {index.table_name!r}: {reason}"
        )


@total_ordering
class Index:
    """A PostgreSQL index as read from the catalog.

    `keys` holds one entry per indexed position: a positive value is the
    1-based column number of the table, 0 marks a computed expression.
    `attrs` is aligned with `keys` and holds the resolved column name or the
    expression text. Collations, operator classes and option bits are kept
    per position as well, and compared positionally.

    Instances are not modified after construction.
    """

    def __init__(
        self,
        oid,
        name,
        table_oid,
        table_name,
        attrs,
        keys=(),
        namespace="public",
        namespace_oid=None,
        num_columns=None,
        is_unique=False,
        is_primary=False,
        is_valid=True,
        is_live=True,
        collations=(),
        classes=(),
        options=(),
        exprs="",
        pred="",
        definition="",
        num_pages=0,
        num_rows=0,
        num_table_pages=0,
        num_table_rows=0,
        num_scans=0,
        num_tuples_read=0,
        num_tuples_fetched=0,
        size=0,
    ):
        if is_primary and not is_unique:
            raise ValueError(f"Primary key index {name} must be unique")
        self.oid = oid
        self.name = name
        self.namespace_oid = namespace_oid
        self.namespace = namespace
        self.table_oid = table_oid
        self.table_name = table_name
        self.attrs = tuple(attrs)
        self.num_columns = len(self.attrs) if num_columns is None else num_columns
        self.is_unique = is_unique
        self.is_primary = is_primary
        self.is_valid = is_valid
        self.is_live = is_live
        self.keys = tuple(keys)
        self.collations = tuple(collations)
        self.classes = tuple(classes)
        self.options = tuple(options)
        self.exprs = exprs or ""
        self.pred = pred or ""
        self.definition = definition or ""
        self.num_pages = num_pages
        self.num_rows = num_rows
        self.num_table_pages = num_table_pages
        self.num_table_rows = num_table_rows
        self.num_scans = num_scans
        self.num_tuples_read = num_tuples_read
        self.num_tuples_fetched = num_tuples_fetched
        # Bytes on disk
        self.size = size

    # Used to sort indexes by name
    def __lt__(self, other):
        if self.name != other.name:
            return self.name < other.name

        return self.oid < other.oid

    def __repr__(self):
        attrs_string = ",".join(self.attrs)
        return f"I({self.name} on {self.table_name}({attrs_string}))"

    # The oid identifies an index within one catalog snapshot
    def __eq__(self, other):
        if not isinstance(other, Index):
            return False

        return self.oid == other.oid

    def __hash__(self):
        return hash(self.oid)

    def kind(self):
        if self.is_primary:
            return PRIMARY_KEY
        if self.is_unique:
            return UNIQUE_INDEX
        return NON_UNIQUE_INDEX

    def qualified_table_name(self):
        if self.namespace == "public":
            return self.table_name
        return f"{self.namespace}.{self.table_name}"

    def qualified_name(self):
        if self.namespace == "public":
            return self.name
        return f"{self.namespace}.{self.name}"

    def joined_attrs(self):
        return ", ".join(self.attrs)

    def check_well_formed(self):
        if len(self.attrs) != self.num_columns:
            raise MalformedIndexDescriptor(
                self,
                f"{len(self.attrs)} attributes for {self.num_columns} columns",
            )

    def equivalent_to(self, other):
        """Reports whether both indexes share the exact same definition."""
        if self.oid == other.oid:
            return True

        return (
            self.table_oid == other.table_oid
            and self.is_unique == other.is_unique
            and self.keys == other.keys
            and self.collations == other.collations
            and self.classes == other.classes
            and self.options == other.options
            and self.exprs == other.exprs
            and self.pred == other.pred
        )

    # Strict prefix: an index on (x, y) is a prefix of one on (x, y, z), but
    # not of another index on (x, y).
    def prefix_of(self, other):
        if not isinstance(other, Index):
            return False
        if len(self.attrs) >= len(other.attrs):
            return False
        return other.attrs[: len(self.attrs)] == self.attrs

    def redundant_with(self, other):
        """Reports whether `other` makes this index redundant.

        Both must agree on uniqueness and on the partial-index predicate, and
        this index's attributes must be a strict prefix of the other's.
        """
        return (
            self.is_unique == other.is_unique
            and self.pred == other.pred
            and self.prefix_of(other)
        )
