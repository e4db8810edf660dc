"""Fixed-width payroll exports and extra-hours balance reconciliation."""
