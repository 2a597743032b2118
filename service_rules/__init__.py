"""Rules service for the Audience Rules platform."""
