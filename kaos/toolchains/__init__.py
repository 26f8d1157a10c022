"""Build-and-run toolchains consumed by the trial executor."""
