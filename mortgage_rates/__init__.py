"""Latest US mortgage rates from FRED."""
