"""Application services orchestrating accounts, tokens and federation."""
