"""Infrastructure: database engine and logging setup."""
