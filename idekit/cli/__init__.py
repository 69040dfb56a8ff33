"""CLI module for idekit."""
