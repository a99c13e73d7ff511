"""Core shrink pipeline: classification, feasibility, compaction and reporting."""
