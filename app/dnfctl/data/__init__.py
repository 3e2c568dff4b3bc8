"""Bundled data files for dnfctl."""
