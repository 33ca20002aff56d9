"""Process-wide settings and telemetry plumbing."""
