"""MapReduce applications, each providing mapf and reducef."""

__all__ = [
    "crash",
    "early_exit",
    "indexer",
    "jobcount",
    "mtiming",
    "nocrash",
    "rtiming",
    "wc",
]