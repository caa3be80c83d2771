from pgvet.anomalies import find_duplicate_index_sets, find_redundant_index_pairs
from pgvet.dbms.postgres_dbms import PostgresDatabaseConnector
from pgvet.index_loader import IndexLoader
from psycopg2.extensions import parse_dsn
import os
import unittest
from unittest.mock import patch

CONNINFO = os.environ.get("PGVET_TEST_CONNINFO")


@unittest.skipUnless(CONNINFO, "PGVET_TEST_CONNINFO not set")
class TestDatabase(unittest.TestCase):
    """Runs against a live server; the tables live in a scratch schema."""

    namespace = "pgvet_test"

    @classmethod
    def setUpClass(cls):
        cls.db = PostgresDatabaseConnector(CONNINFO, autocommit=True)
        # Connector sessions are read-only; the fixture needs to write
        cls.db._connection.set_session(readonly=False)
        statements = [
            f"drop schema if exists {cls.namespace} cascade",
            f"create schema {cls.namespace}",
            f"create table {cls.namespace}.orders "
            "(id int primary key, customer_id int, created_at date)",
            f"create index orders_customer_idx on {cls.namespace}.orders "
            "(customer_id)",
            f"create index orders_customer_idx2 on {cls.namespace}.orders "
            "(customer_id)",
            f"create index orders_customer_created_idx on {cls.namespace}.orders "
            "(customer_id, created_at)",
            f"create index orders_lower_idx on {cls.namespace}.orders "
            "(lower(id::text), created_at)",
        ]
        for statement in statements:
            cls.db.exec_only(statement)
        cls.db._connection.set_session(readonly=True)

    @classmethod
    def tearDownClass(cls):
        cls.db._connection.set_session(readonly=False)
        cls.db.exec_only(f"drop schema if exists {cls.namespace} cascade")
        cls.db.close()

    def test_connection_info(self):
        info = self.db.connection_info()
        self.assertTrue(info["user"])
        self.assertTrue(info["database"])
        self.assertTrue(self.db.server_version())

    def test_namespace(self):
        self.assertTrue(self.db.namespace_exists(self.namespace))
        self.assertFalse(self.db.namespace_exists("pgvet_no_such_schema"))
        self.assertEqual(self.db.number_of_indexes(self.namespace), 5)

    def test_load_and_analyze(self):
        indexes = IndexLoader(self.db, self.namespace).all_indexes()
        by_name = {index.name: index for index in indexes}

        self.assertEqual(len(indexes), 5)
        self.assertEqual(by_name["orders_pkey"].kind(), "P")
        self.assertEqual(
            by_name["orders_customer_created_idx"].attrs, ("customer_id", "created_at")
        )
        self.assertEqual(by_name["orders_lower_idx"].attrs[1], "created_at")

        duplicates = find_duplicate_index_sets(indexes)
        self.assertEqual(
            [sorted(x.name for x in duplicates[0])],
            [["orders_customer_idx", "orders_customer_idx2"]],
        )
        self.assertEqual(len(duplicates), 1)

        pairs = find_redundant_index_pairs(indexes)
        self.assertEqual(
            [(a.name, b.name) for a, b in pairs],
            [
                ("orders_customer_idx", "orders_customer_created_idx"),
                ("orders_customer_idx2", "orders_customer_created_idx"),
            ],
        )


class TestConninfo(unittest.TestCase):
    @patch.dict(os.environ, {"USER": "alice"})
    def test_defaults(self):
        dsn = PostgresDatabaseConnector.complete_conninfo("host=localhost port=5432")
        self.assertEqual(
            parse_dsn(dsn),
            {"host": "localhost", "port": "5432", "user": "alice", "dbname": "alice"},
        )

    @patch.dict(os.environ, {"USER": "alice"})
    def test_explicit_values(self):
        dsn = PostgresDatabaseConnector.complete_conninfo("postgresql://bob@db/shop")
        parameters = parse_dsn(dsn)
        self.assertEqual(parameters["user"], "bob")
        self.assertEqual(parameters["dbname"], "shop")
        self.assertEqual(parameters["host"], "db")

    @patch.dict(os.environ, {"USER": "carol"})
    def test_empty(self):
        parameters = parse_dsn(PostgresDatabaseConnector.complete_conninfo(None))
        self.assertEqual(parameters, {"user": "carol", "dbname": "carol"})


if __name__ == "__main__":
    unittest.main()
