"""CLI command implementations; each run_* returns a process exit code."""
