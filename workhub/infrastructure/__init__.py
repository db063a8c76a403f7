"""Infrastructure: persistence, security, messaging, storage and delivery services."""
