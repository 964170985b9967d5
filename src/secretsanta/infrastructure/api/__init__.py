"""HTTP API for SecretSanta."""
