import logging


class DatabaseConnector:
    def __init__(self, db_name, autocommit=False):
        self.db_name = db_name
        self.autocommit = autocommit
        self._connection = None
        self._cursor = None
        logging.debug("Database connector created: {}".format(db_name))

    def exec_only(self, statement, parameters=None):
        self._cursor.execute(statement, parameters)

    def exec_fetch(self, statement, one=True, parameters=None):
        self._cursor.execute(statement, parameters)
        if one:
            return self._cursor.fetchone()
        return self._cursor.fetchall()

    def exec_fetchall(self, statement, parameters=None):
        return self.exec_fetch(statement, one=False, parameters=parameters)

    def close(self):
        self._connection.close()
        logging.debug("Database connector closed: {}".format(self.db_name))

    def connection_info(self):
        raise NotImplementedError

    def server_version(self):
        raise NotImplementedError
