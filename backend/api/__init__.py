"""Backend API surface."""
