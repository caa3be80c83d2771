import logging

from .utils import indexes_by_table


def check_indexes(indexes):
    for index in indexes:
        index.check_well_formed()


# Finds indexes that are exact duplicates of one another and groups them into
# sets. All but one index in each set is superfluous.
def find_duplicate_index_sets(indexes):
    check_indexes(indexes)
    logging.debug(f"Looking for duplicates among {len(indexes)} indexes")

    duplicate_sets = []
    remaining = list(indexes)
    while remaining:
        pivot = remaining[0]
        duplicates, remaining = bisect_indexes(remaining, pivot.equivalent_to)
        if len(duplicates) >= 2:
            logging.debug(f"Duplicate index set: {duplicates}")
            duplicate_sets.append(duplicates)

    logging.info(f"Sets of duplicate indexes found: {len(duplicate_sets)}")
    return duplicate_sets


# Returns (subsumed, subsuming) pairs where the first index is made redundant
# by the second one. Primary keys and unique indexes enforce constraints and
# are never considered.
def find_redundant_index_pairs(indexes):
    check_indexes(indexes)
    candidates = [
        index for index in indexes if not index.is_primary and not index.is_unique
    ]
    logging.debug(
        f"Looking for redundant indexes among {len(candidates)} non-unique indexes"
    )

    # Grouping by table keeps the pairwise comparisons small. Tables, subsumed
    # indexes and subsuming indexes are all visited in a fixed order, so the
    # first match for an index does not depend on the order of the input.
    groups = sorted(
        indexes_by_table(candidates).values(),
        key=lambda group: (group[0].table_name, group[0].table_oid),
    )

    redundant_pairs = []
    for group in groups:
        supersets = sorted(group, key=lambda x: (len(x.attrs), x.name, x.oid))
        for index in sorted(group, key=lambda x: (x.name, x.oid)):
            for other in supersets:
                if other is not index and index.redundant_with(other):
                    redundant_pairs.append((index, other))
                    break

    logging.info(f"Pairs of redundant indexes found: {len(redundant_pairs)}")
    return redundant_pairs


# Returns indexes which have been scanned at most `cutoff` times since
# statistics were last reset. Such indexes are possibly superfluous.
def find_unused_indexes(indexes, cutoff):
    if cutoff < 0:
        raise ValueError(f"Scan cutoff must not be negative: {cutoff}")
    check_indexes(indexes)

    unused = filter_indexes(indexes, lambda index: index.num_scans <= cutoff)
    logging.info(f"Indexes scanned at most {cutoff} times: {len(unused)}")
    return unused


# Returns two lists: the indexes for which pred holds, and all others. Both
# keep the order of `indexes`.
def bisect_indexes(indexes, pred):
    matching, rest = [], []
    for index in indexes:
        if pred(index):
            matching.append(index)
        else:
            rest.append(index)
    return matching, rest


def filter_indexes(indexes, pred):
    return [index for index in indexes if pred(index)]
