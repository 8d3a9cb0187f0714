"""Service layer for the web application."""
