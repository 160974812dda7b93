"""Domain services built on the timeline engine."""
