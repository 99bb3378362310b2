"""Hand landmark detection (MediaPipe) and landmark index constants."""
