"""Process-wide storage for the loaded contact list."""
