"""Foundation: configuration, errors, and the tool registry."""
