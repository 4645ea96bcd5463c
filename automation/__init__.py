"""Remote court system integration."""
