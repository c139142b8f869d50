"""Services Layer — async operations that combine core builders with a DB session."""
