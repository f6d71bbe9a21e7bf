"""Version 1 route modules, one ``router`` per resource."""
