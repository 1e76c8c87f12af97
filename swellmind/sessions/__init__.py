"""Session write path: forecast linking, duplicate rejection, change events."""
