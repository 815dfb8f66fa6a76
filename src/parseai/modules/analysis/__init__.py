"""Parse AI Analysis Module - Context assembly, model calls and heuristic fallback."""
