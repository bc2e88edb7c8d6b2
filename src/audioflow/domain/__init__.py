"""Domain layer: library discovery and playback."""
