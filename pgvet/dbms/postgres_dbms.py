import logging
import os

import psycopg2
from psycopg2.extensions import make_dsn, parse_dsn

from ..database_connector import DatabaseConnector


class PostgresDatabaseConnector(DatabaseConnector):
    def __init__(self, conninfo, autocommit=False):
        self.dsn = self.complete_conninfo(conninfo)
        DatabaseConnector.__init__(self, parse_dsn(self.dsn)["dbname"],
                                   autocommit=autocommit)
        self.db_system = 'postgres'
        self.create_connection()

        logging.debug('Postgres connector created: {}'.format(self.db_name))

    @staticmethod
    def complete_conninfo(conninfo):
        """Names the user and database explicitly for clearer errors.

        libpq falls back to the OS user for both when they are missing; the
        fallback is spelled out here so that it shows up in the report.
        """
        parameters = parse_dsn(conninfo or '')
        if not parameters.get('user'):
            parameters['user'] = os.environ.get('USER', 'postgres')
        if not parameters.get('dbname'):
            parameters['dbname'] = parameters['user']
        return make_dsn(**parameters)

    def create_connection(self):
        if self._connection:
            self.close()
        self._connection = psycopg2.connect(self.dsn)
        # Only the catalog and statistics views are read
        self._connection.set_session(readonly=True, autocommit=self.autocommit)
        self._cursor = self._connection.cursor()

    def connection_info(self):
        info = self._connection.info
        return {
            'host': info.host,
            'port': info.port,
            'user': info.user,
            'database': info.dbname,
        }

    def server_version(self):
        result = self.exec_fetch('show server_version')
        return result[0]

    def namespace_exists(self, namespace):
        statement = 'select count(*) from pg_namespace where nspname = %s'
        result = self.exec_fetch(statement, parameters=(namespace,))
        return result[0] > 0

    def number_of_indexes(self, namespace):
        statement = 'select count(*) from pg_indexes where schemaname = %s'
        result = self.exec_fetch(statement, parameters=(namespace,))
        return result[0]
