"""Settings, logging, errors and the spreadsheet backend."""
