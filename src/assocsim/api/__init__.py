"""Import-first API for running scenarios."""
