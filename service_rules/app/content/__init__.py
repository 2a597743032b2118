"""
Content package.

Holds the content template catalogue a rule can draw tiles from, the
tokenized-copy renderer used for previews, and the checks run over a
rule's content and fallback blocks.
"""
