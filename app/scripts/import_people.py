import sys
import os
import argparse
import logging

# Add parent directory to path so we can import app modules
current_dir = os.path.dirname(os.path.abspath(__file__))
parent_dir = os.path.dirname(current_dir)
sys.path.append(parent_dir)

import app
from constants import BULK_MODE_ADD
from exceptions import AtCreatorException
from services.import_reconciler import read_name_pairs
from services.selection import SelectionManager

# Configure logging
logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)


def import_file(path, tags=(), flask_app=None):
    """
    Import a firstname,lastname CSV file, optionally tagging the new people.

    The people are committed first, then the tags go on all of them in one
    bulk edit. A failed bulk edit leaves the imported people untagged.
    """
    with open(path, "r", encoding="utf-8-sig", newline="") as f:
        pairs = read_name_pairs(f)
    logger.info(f"Read {len(pairs)} names from {path}")

    flask_app = flask_app or app.create_app()
    with flask_app.app_context():
        contacts = flask_app.contacts
        try:
            result = contacts.people.import_people(pairs)
            if tags and result.added:
                selection = SelectionManager(person.id for person in result.added)
                tagged = contacts.bulk_tags.apply_to_selection(selection, list(tags), BULK_MODE_ADD)
                logger.info(f"Tagged {len(tagged.applied_ids)} people with {', '.join(tagged.tags)}")
        except AtCreatorException as e:
            logger.error(f"Import failed: {e.message}")
            return None

    logger.info(f"{len(result.added)} added, {result.duplicates} duplicates, {result.invalid} invalid")
    return result


def main():
    parser = argparse.ArgumentParser(description="Import people from a two column CSV file")
    parser.add_argument("path", help="CSV file with firstname,lastname rows")
    parser.add_argument("--tag", action="append", default=[], help="Tag to put on every imported person")

    args = parser.parse_args()

    if import_file(args.path, args.tag) is not None:
        print("SUCCESS")
        sys.exit(0)
    else:
        print("FAILURE")
        sys.exit(1)


if __name__ == "__main__":
    main()
