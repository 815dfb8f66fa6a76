"""Parse AI modules: documents, web, analysis, charts."""
