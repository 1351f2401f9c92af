"""Species domain: records, validation and the edit workflow."""
