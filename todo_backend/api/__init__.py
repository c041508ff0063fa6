"""HTTP surface for reminder settings, manual triggers and diagnostics."""
