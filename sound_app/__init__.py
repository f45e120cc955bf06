"""Personal music library: song ingestion, storage and record bookkeeping."""
