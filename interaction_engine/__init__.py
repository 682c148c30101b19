"""Local interaction-state engine for a live video-meeting UI."""
