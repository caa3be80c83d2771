import logging

from .index import UNIQUE_INDEX

# Orderings applied before the anomalies are reported. None of them changes
# which indexes belong to a result, and none modifies its input.


def rank_duplicate_sets(duplicate_sets):
    # Indexes within a set by name, descending
    ranked = [
        sorted(duplicates, key=lambda x: x.name, reverse=True)
        for duplicates in duplicate_sets
    ]
    # Sets by table name, then by index name
    ranked.sort(key=lambda duplicates: (duplicates[0].table_name, duplicates[0].name))
    return ranked


def rank_redundant_pairs(redundant_pairs):
    return sorted(redundant_pairs, key=lambda pair: pair[0].size, reverse=True)


def is_relevant_unused_index(index, min_size, min_rows):
    # Unique indexes enforce a constraint and are not recorded as scanned when
    # they reject a write, so a low scan count says nothing about them.
    if index.kind() == UNIQUE_INDEX:
        return False
    if index.size < min_size:
        return False
    if index.num_rows < min_rows:
        return False
    return True


def rank_unused_for_report(unused_indexes, min_size, min_rows):
    if min_size < 0 or min_rows < 0:
        raise ValueError(
            f"Thresholds must not be negative: min_size={min_size}, min_rows={min_rows}"
        )
    relevant = [
        index
        for index in unused_indexes
        if is_relevant_unused_index(index, min_size, min_rows)
    ]
    logging.debug(
        f"{len(relevant)} of {len(unused_indexes)} unused indexes are relevant"
    )

    # Non-PK indexes first, each group by decreasing size
    relevant.sort(key=lambda x: (x.is_primary, -x.size))
    return relevant
