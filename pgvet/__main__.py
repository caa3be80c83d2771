import logging
import sys

from .vet import IndexVet

if __name__ == "__main__":
    logging.basicConfig(
        format="%(asctime)s %(levelname)s %(message)s", level=logging.WARNING
    )
    try:
        IndexVet().run()
    except Exception as e:
        logging.critical(e)
        sys.exit(1)
