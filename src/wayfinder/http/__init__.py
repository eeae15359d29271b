"""HTTP request contract: the narrow read surface the rules consume."""
