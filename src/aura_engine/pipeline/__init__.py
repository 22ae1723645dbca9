"""Generation pipeline stages: prompts, execution, streaming, parsing and fallback."""
