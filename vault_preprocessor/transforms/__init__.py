"""Content transforms applied to each note."""
