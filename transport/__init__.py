"""Transport layers for outbound messaging."""
