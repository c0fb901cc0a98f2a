"""Continuous integration support: run info, runtime monitor setup and network reports."""
