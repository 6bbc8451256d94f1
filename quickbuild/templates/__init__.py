"""Built-in application sources shipped as package data."""
