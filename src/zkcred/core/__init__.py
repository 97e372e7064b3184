"""Core protocol: trees, accounts, input derivation, validation and proving."""
