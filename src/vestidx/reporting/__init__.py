"""Charts and exports for simulation results."""
