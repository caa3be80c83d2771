import logging

from .index import Index


class CatalogError(Exception):
    pass


# Only valid and live indexes are selected: invalid ones are not used by the
# planner, non-live ones are being dropped.
INDEX_INFO_STATEMENT = """
select c.oid,
       c.relname,
       c.relnamespace,
       ns.nspname,
       i.indrelid,
       t.relname,
       i.indnatts,
       i.indisunique,
       i.indisprimary,
       i.indisvalid,
       i.indislive,
       i.indkey::text,
       i.indcollation::text,
       i.indclass::text,
       i.indoption::text,
       coalesce(pg_get_expr(i.indexprs, i.indrelid), ''),
       coalesce(pg_get_expr(i.indpred, i.indrelid), ''),
       t.relpages,
       t.reltuples::bigint,
       c.relpages,
       c.reltuples::bigint,
       coalesce(s.idx_scan, 0),
       coalesce(s.idx_tup_read, 0),
       coalesce(s.idx_tup_fetch, 0),
       pg_relation_size(c.oid),
       (select indexdef
          from pg_indexes
         where schemaname = ns.nspname
           and tablename = t.relname
           and indexname = c.relname)
  from pg_index i
  join pg_class c on c.oid = i.indexrelid
  join pg_class t on t.oid = i.indrelid
  join pg_namespace ns on ns.oid = c.relnamespace
  left outer join pg_stat_user_indexes s on s.indexrelid = i.indexrelid
 where i.indislive is true and i.indisvalid is true
   and ns.nspname = %s
 order by t.relname, c.relname"""

# Column names of all tables having at least one valid index
TABLE_COLUMNS_STATEMENT = """
select c.oid, a.attname, a.attnum
  from pg_class c
  join pg_attribute a on a.attrelid = c.oid
 where c.oid in (select indrelid from pg_index
                  where indislive is true and indisvalid is true)
   and a.attnum >= 1"""


class IndexLoader:
    def __init__(self, db_connector, namespace="public"):
        logging.debug(f"Init IndexLoader for namespace {namespace}")
        self.db_connector = db_connector
        self.namespace = namespace
        self._indexes = None

    def all_indexes(self):
        """Returns all valid indexes of the namespace.

        The catalog is only queried once. Every call returns a new list, so
        callers may reorder it freely.
        """
        if self._indexes is None:
            self._indexes = self._load_indexes()
        return list(self._indexes)

    def _load_indexes(self):
        rows = self.db_connector.exec_fetchall(
            INDEX_INFO_STATEMENT, parameters=(self.namespace,)
        )
        # All column names are fetched in a single round trip, expressions are
        # part of the index rows already.
        table_columns = self.table_columns()

        indexes = []
        for row in rows:
            oid = row[0]
            name = row[1]
            table_oid = row[4]
            keys = parse_int_vector(row[11])
            exprs = row[15]
            attrs = self.resolve_attrs(
                name, oid, keys, exprs, table_columns.get(table_oid, {})
            )
            indexes.append(
                Index(
                    oid=oid,
                    name=name,
                    namespace_oid=row[2],
                    namespace=row[3],
                    table_oid=table_oid,
                    table_name=row[5],
                    num_columns=row[6],
                    is_unique=row[7],
                    is_primary=row[8],
                    is_valid=row[9],
                    is_live=row[10],
                    keys=keys,
                    collations=parse_int_vector(row[12]),
                    classes=parse_int_vector(row[13]),
                    options=parse_int_vector(row[14]),
                    exprs=exprs,
                    pred=row[16],
                    num_table_pages=row[17],
                    num_table_rows=row[18],
                    num_pages=row[19],
                    num_rows=row[20],
                    num_scans=row[21],
                    num_tuples_read=row[22],
                    num_tuples_fetched=row[23],
                    size=row[24],
                    definition=row[25],
                    attrs=attrs,
                )
            )
        logging.info(f"Loaded {len(indexes)} indexes from namespace {self.namespace}")
        return indexes

    def table_columns(self):
        """Returns {table oid: {column number: column name}}."""
        rows = self.db_connector.exec_fetchall(TABLE_COLUMNS_STATEMENT)
        columns = {}
        for table_oid, column_name, column_number in rows:
            if table_oid not in columns:
                columns[table_oid] = {}
            columns[table_oid][column_number] = column_name
        return columns

    @staticmethod
    def resolve_attrs(name, oid, keys, exprs, columns):
        # Each key is either a column reference or takes the next expression
        expressions = split_exprs(exprs)
        attrs = []
        for position, key in enumerate(keys):
            if key == 0:
                if not expressions:
                    raise CatalogError(
                        f"Index {name!r} ({oid}): no expression for key #{position}"
                    )
                attrs.append(expressions.pop(0))
            elif key in columns:
                attrs.append(columns[key])
            else:
                raise CatalogError(
                    f"Index {name!r} ({oid}): no column found for key #{position} "
                    f"({key})"
                )
        return attrs


def parse_int_vector(text):
    # int2vector and oidvector are rendered as whitespace separated integers
    if text is None:
        return ()
    return tuple(int(x) for x in text.split())


# Naively splits the output of pg_get_expr() at top level commas, e.g.
# "f(x, y), z, a + b" -> ["f(x, y)", "z", "a + b"]
def split_exprs(text):
    exprs = []
    current = []
    nesting = 0
    for char in text:
        if char == "(":
            nesting += 1
        elif char == ")":
            nesting -= 1
        elif char == " " and not current:
            continue
        elif char == "," and nesting == 0:
            exprs.append("".join(current))
            current = []
            continue
        current.append(char)
    if current:
        exprs.append("".join(current))
    return exprs
