"""Energy grid simulation engine: growth, random events, flexibility tools, warnings."""
