"""OpenCV preview rendering."""
