"""Harness logic: snapshots, diffing, attribution, existence and orchestration."""
