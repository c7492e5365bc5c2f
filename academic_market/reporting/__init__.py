"""Summary metrics and plots built from simulation results."""
