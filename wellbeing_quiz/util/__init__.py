"""Small helpers shared by the schemas, models and store."""
