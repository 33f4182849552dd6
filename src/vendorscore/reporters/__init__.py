"""Report renderers: terminal, Markdown, JSON."""
