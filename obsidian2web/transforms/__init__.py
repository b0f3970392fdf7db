"""Rewrite processors run by the build pipeline."""
