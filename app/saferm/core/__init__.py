"""Core infrastructure: configuration, paths, identities, audit log and theme."""
