"""Live process table with sortable CPU and memory usage."""
