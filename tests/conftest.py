"""Shared test configuration."""

import matplotlib

# Headless plotting for the whole suite
matplotlib.use("Agg")
