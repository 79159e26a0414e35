"""Run a one-off ECS task and propagate its exit status."""

__version__ = "0.1.0"
