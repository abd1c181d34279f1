"""infograph: local notebooks of text sources, rendered into infographics."""
