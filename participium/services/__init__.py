"""Domain services: routing, lifecycle, comments, events and seeding."""
