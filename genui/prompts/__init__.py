"""Prompt builders for the decision, hydration and suggestion stages."""
