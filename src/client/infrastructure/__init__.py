"""Infrastructure layer: embedded datastore, settings, logging and outbox persistence."""
