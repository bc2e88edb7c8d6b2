"""Command handlers for the AudioFlow CLI and transport shell."""
