"""Language-model backends and prompt templates."""
