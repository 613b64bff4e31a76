"""Settings, logging and timing helpers shared by every layer."""
