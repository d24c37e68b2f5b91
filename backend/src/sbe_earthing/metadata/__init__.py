"""Form metadata schema validation."""
