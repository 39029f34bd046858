"""Row transforms: numeric coercion, aggregation, date bucketing, sorting."""
