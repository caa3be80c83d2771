import json
import logging
import os
import sys

from .anomalies import (
    find_duplicate_index_sets,
    find_redundant_index_pairs,
    find_unused_indexes,
)
from .dbms.postgres_dbms import PostgresDatabaseConnector
from .index_loader import IndexLoader
from .report import ReportPrinter
from .table_printer import set_locale_from_environment
from .utils import mib_to_b

# Used for every key the config file does not specify
DEFAULT_CONFIG = {
    "conninfo": "host=localhost port=5432",
    "namespace": "public",
    "unused_cutoff": 10,
    "min_index_size_MiB": 1,
    "min_index_rows": 10,
    "verbose": False,
}

NON_NEGATIVE_KEYS = ["unused_cutoff", "min_index_size_MiB", "min_index_rows"]


class IndexVet:
    def __init__(self, output=None):
        logging.debug("Init IndexVet")
        self.db_connector = None
        self.default_config_file = "example_configs/config.json"
        self.output = output if output is not None else sys.stdout

    def run(self):
        """This is called when running `python3 -m pgvet`."""
        config_file = self._parse_command_line_args()
        if not config_file and os.path.isfile(self.default_config_file):
            config_file = self.default_config_file

        config = self.load_config(config_file)
        if config["verbose"]:
            logging.getLogger().setLevel(logging.DEBUG)
        set_locale_from_environment()

        logging.info("Starting index analysis")
        self.setup_db_connector(config["conninfo"])
        try:
            report = self.analyze(config)
            report.generate(self.output)
            self.output.flush()
        except BrokenPipeError:
            # The reader went away, e.g. `python3 -m pgvet | head`
            logging.debug("Output closed before the report was written")
            if self.output is sys.stdout:
                # Python flushes stdout once more at exit
                devnull = os.open(os.devnull, os.O_WRONLY)
                os.dup2(devnull, sys.stdout.fileno())
        finally:
            self.db_connector.close()

    def load_config(self, config_file=None):
        config = dict(DEFAULT_CONFIG)
        if config_file:
            logging.info("Using config file {}".format(config_file))
            with open(config_file) as f:
                config.update(json.load(f))
        self._check_config(config)
        return config

    def _check_config(self, config):
        unknown = set(config) - set(DEFAULT_CONFIG)
        if unknown:
            logging.warning(f"Ignoring unknown config keys: {sorted(unknown)}")
        for key in NON_NEGATIVE_KEYS:
            if config[key] < 0:
                raise ValueError(f"Config value {key} must not be negative")

    def analyze(self, config):
        namespace = config["namespace"]
        if not self.db_connector.namespace_exists(namespace):
            logging.warning(f"Schema {namespace} does not exist")

        loader = IndexLoader(self.db_connector, namespace)
        indexes = loader.all_indexes()
        logging.debug(
            f"{len(indexes)} of {self.db_connector.number_of_indexes(namespace)} "
            "indexes are valid and live"
        )

        # The detectors are independent of one another
        duplicates = find_duplicate_index_sets(indexes)
        unused = find_unused_indexes(indexes, config["unused_cutoff"])
        redundants = find_redundant_index_pairs(indexes)

        return ReportPrinter(
            self.db_connector.connection_info(),
            duplicates,
            unused,
            redundants,
            unused_cutoff=config["unused_cutoff"],
            min_index_size=mib_to_b(config["min_index_size_MiB"]),
            min_index_rows=config["min_index_rows"],
            namespace=namespace,
            server_version=self.db_connector.server_version(),
        )

    def _parse_command_line_args(self):
        arguments = sys.argv
        if "CRITICAL_LOG" in arguments:
            logging.getLogger().setLevel(logging.CRITICAL)
        if "ERROR_LOG" in arguments:
            logging.getLogger().setLevel(logging.ERROR)
        if "INFO_LOG" in arguments:
            logging.getLogger().setLevel(logging.INFO)
        if "VERBOSE" in arguments:
            logging.getLogger().setLevel(logging.DEBUG)
        for argument in arguments[1:]:
            if argument.endswith(".json"):
                return argument

    def setup_db_connector(self, conninfo):
        if self.db_connector:
            logging.info("Create new database connector (closing old)")
            self.db_connector.close()
        self.db_connector = PostgresDatabaseConnector(conninfo)
