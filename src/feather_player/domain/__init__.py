"""Domain layer - library models, provider access and playback."""
