"""anynote - local notes and tasks organizer."""
