"""Authentication core: credentials, sessions, access verification and roles."""
