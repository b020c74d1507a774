"""Configuration loaded from the environment (`.env` / `.env.example`)."""
