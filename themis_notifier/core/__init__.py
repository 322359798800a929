"""Configuration, logging and HTTP plumbing shared by the notifier."""
