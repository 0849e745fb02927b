"""OAuth2 token records and their persistence."""
