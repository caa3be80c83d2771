# --- Unit conversions ---
# Storage, in binary units
KiB = 1024
MiB = 1024 * KiB
GiB = 1024 * MiB
TiB = 1024 * GiB


def b_to_mib(b):
    return b / MiB


def mib_to_b(mib):
    return mib * MiB


def human_readable_size(b):
    for unit, name in ((TiB, "TiB"), (GiB, "GiB"), (MiB, "MiB"), (KiB, "KiB")):
        if b >= unit:
            return f"{b / unit:.1f} {name}"
    return f"{int(b)} B"


# --- Index utilities ---
def indexes_by_table(indexes):
    indexes_by_table = {}
    for index in indexes:
        table = index.table_oid
        if table not in indexes_by_table:
            indexes_by_table[table] = []

        indexes_by_table[table].append(index)

    return indexes_by_table
