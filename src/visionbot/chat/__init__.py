"""Chat-facing side of the bot."""
